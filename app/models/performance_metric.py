"""
Weekly per-stylist performance metrics from the Phorest staff report
"""
from datetime import datetime


def create_performance_metric_model(db):
    """Factory function to create PerformanceMetric model with db instance"""

    class PerformanceMetric(db.Model):
        """
        Weekly metrics keyed by (user_id, week_start)

        Re-syncing a week overwrites earlier figures since Phorest may revise
        a report after it is first published.
        """
        __tablename__ = 'phorest_performance_metrics'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.String(50), nullable=False)
        phorest_staff_id = db.Column(db.String(100))
        week_start = db.Column(db.Date, nullable=False)
        new_clients = db.Column(db.Integer, nullable=False, default=0)
        retention_rate = db.Column(db.Float, default=0)
        retail_sales = db.Column(db.Numeric(12, 2), nullable=False, default=0)
        extension_clients = db.Column(db.Integer, nullable=False, default=0)
        total_revenue = db.Column(db.Numeric(12, 2), nullable=False, default=0)
        service_count = db.Column(db.Integer, nullable=False, default=0)
        average_ticket = db.Column(db.Numeric(12, 2), default=0)
        rebooking_rate = db.Column(db.Float, default=0)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('user_id', 'week_start', name='uq_performance_user_week'),
        )

        def __repr__(self):
            return f'<PerformanceMetric {self.user_id} week of {self.week_start}>'

    return PerformanceMetric
