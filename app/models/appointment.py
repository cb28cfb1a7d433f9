"""
Appointment model synchronized from Phorest
"""
from datetime import datetime


def create_appointment_model(db):
    """Factory function to create Appointment model with db instance"""

    class Appointment(db.Model):
        """
        Appointment upserted by its Phorest id

        The Phorest staff id is always retained; stylist_user_id is null when
        the staff member has no identity mapping. Client details are
        denormalized and not linked to the Client table.
        """
        __tablename__ = 'phorest_appointments'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        phorest_id = db.Column(db.String(100), nullable=False, unique=True)
        stylist_user_id = db.Column(db.String(50), nullable=True, index=True)
        phorest_staff_id = db.Column(db.String(100), nullable=True)
        phorest_client_id = db.Column(db.String(100), nullable=True)
        location_id = db.Column(db.String(50), nullable=True)
        client_name = db.Column(db.String(200))
        client_phone = db.Column(db.String(50))
        appointment_date = db.Column(db.Date, nullable=True, index=True)
        start_time = db.Column(db.String(5), nullable=False, default='09:00')
        end_time = db.Column(db.String(5), nullable=False, default='10:00')
        service_name = db.Column(db.String(200))
        service_category = db.Column(db.String(100))
        status = db.Column(db.String(30), nullable=False, default='unknown')
        total_price = db.Column(db.Numeric(12, 2), nullable=True)
        is_new_client = db.Column(db.Boolean, default=False)
        notes = db.Column(db.Text)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_phorest_appointments_stylist_date', 'stylist_user_id', 'appointment_date'),
        )

        def __repr__(self):
            return f'<Appointment {self.phorest_id} {self.appointment_date} {self.status}>'

    return Appointment
