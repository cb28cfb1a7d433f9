"""
Client model synchronized from Phorest
"""
from datetime import datetime


def create_client_model(db):
    """Factory function to create Client model with db instance"""

    class Client(db.Model):
        """
        Canonical client row, one per Phorest client id

        Phorest lists clients per branch; the branch and location stored here
        are those of the branch showing the most recent last visit.
        """
        __tablename__ = 'phorest_clients'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        phorest_client_id = db.Column(db.String(100), nullable=False, unique=True)
        name = db.Column(db.String(200), nullable=False, default='Unknown')
        email = db.Column(db.String(150))
        phone = db.Column(db.String(50))
        visit_count = db.Column(db.Integer, nullable=False, default=0)
        last_visit = db.Column(db.DateTime, nullable=True)
        first_visit = db.Column(db.DateTime, nullable=True)
        preferred_stylist_id = db.Column(db.String(50), nullable=True)
        total_spend = db.Column(db.Numeric(12, 2), nullable=False, default=0)
        is_vip = db.Column(db.Boolean, default=False)
        notes = db.Column(db.Text)
        location_id = db.Column(db.String(50), nullable=True, index=True)
        phorest_branch_id = db.Column(db.String(100), nullable=True)
        branch_name = db.Column(db.String(150), nullable=True)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        def __repr__(self):
            return f'<Client {self.phorest_client_id}: {self.name}>'

    return Client
