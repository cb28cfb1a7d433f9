"""
Location and staff identity mapping models
Read-only reference data for the Phorest sync: maintained by the dashboard,
never written by the sync engine
"""
from datetime import datetime


def create_location_models(db):
    """Factory function to create Location and StaffMapping models with db instance"""

    class Location(db.Model):
        """
        Internal salon location

        Attributes:
            id: Internal location identifier
            name: Display name, matched case-insensitively against Phorest branch names
            phorest_branch_id: Explicit link to a Phorest branch, preferred over name matching
            is_active: Whether the location is currently operating
        """
        __tablename__ = 'locations'

        id = db.Column(db.String(50), primary_key=True)
        name = db.Column(db.String(150), nullable=False)
        phorest_branch_id = db.Column(db.String(100), nullable=True)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)

        def __repr__(self):
            return f'<Location {self.id}: {self.name}>'

    class StaffMapping(db.Model):
        """
        Association between a Phorest staff id and an internal user id

        An external staff id maps to at most one internal user.
        """
        __tablename__ = 'phorest_staff_mapping'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.String(50), nullable=False, index=True)
        phorest_staff_id = db.Column(db.String(100), nullable=False, unique=True)
        phorest_staff_name = db.Column(db.String(150))
        phorest_staff_email = db.Column(db.String(150))
        phorest_branch_id = db.Column(db.String(100))
        phorest_branch_name = db.Column(db.String(150))
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        def __repr__(self):
            return f'<StaffMapping {self.phorest_staff_id} -> {self.user_id}>'

    return Location, StaffMapping
