"""
Sync log model
Append-only audit trail with one row per sub-synchronizer invocation
"""
from datetime import datetime


def create_sync_log_model(db):
    """Factory function to create SyncLog model with db instance"""

    class SyncLog(db.Model):
        """
        Terminal outcome of one sync invocation

        Attributes:
            sync_type: staff, appointments, clients, reports or sales
            status: success or failed
            records_synced: Rows written (mapped staff count for staff)
            started_at: When the sub-synchronizer started running
            completed_at: When it reached its terminal state
            error_message: Failure message, null on success
            sync_metadata: JSON context such as the quick flag and date window
        """
        __tablename__ = 'phorest_sync_log'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        sync_type = db.Column(db.String(30), nullable=False, index=True)
        status = db.Column(db.String(20), nullable=False)
        records_synced = db.Column(db.Integer, default=0)
        started_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
        completed_at = db.Column(db.DateTime)
        error_message = db.Column(db.Text)
        sync_metadata = db.Column('metadata', db.JSON, default=dict)

        __table_args__ = (
            db.Index('idx_sync_log_started', 'started_at'),
        )

        def to_dict(self):
            return {
                'id': self.id,
                'sync_type': self.sync_type,
                'status': self.status,
                'records_synced': self.records_synced,
                'started_at': self.started_at.isoformat() if self.started_at else None,
                'completed_at': self.completed_at.isoformat() if self.completed_at else None,
                'error_message': self.error_message,
                'metadata': self.sync_metadata or {},
            }

        def __repr__(self):
            return f'<SyncLog {self.sync_type} {self.status} ({self.records_synced})>'

    return SyncLog
