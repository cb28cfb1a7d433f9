"""
Sales transaction line items and derived daily summaries
"""
from datetime import datetime


def create_sales_models(db):
    """Factory function to create SalesTransaction and DailySalesSummary models"""

    class SalesTransaction(db.Model):
        """
        One line item of a Phorest purchase

        Keyed by (phorest_transaction_id, line_key). line_key is the stable
        per-line Phorest id when the API supplies one, otherwise the item's
        position within the purchase.
        """
        __tablename__ = 'phorest_sales_transactions'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        phorest_transaction_id = db.Column(db.String(100), nullable=False)
        line_key = db.Column(db.String(100), nullable=False)
        stylist_user_id = db.Column(db.String(50), nullable=True, index=True)
        phorest_staff_id = db.Column(db.String(100), nullable=True)
        phorest_branch_id = db.Column(db.String(100), nullable=True)
        branch_name = db.Column(db.String(150))
        location_id = db.Column(db.String(50), nullable=True)
        transaction_date = db.Column(db.Date, nullable=False, index=True)
        transaction_time = db.Column(db.String(5))
        client_name = db.Column(db.String(200))
        client_phone = db.Column(db.String(50))
        item_type = db.Column(db.String(20), nullable=False, default='service')
        item_name = db.Column(db.String(200), nullable=False)
        item_category = db.Column(db.String(100))
        quantity = db.Column(db.Integer, default=1)
        unit_price = db.Column(db.Numeric(12, 2))
        discount_amount = db.Column(db.Numeric(12, 2), default=0)
        tax_amount = db.Column(db.Numeric(12, 2), default=0)
        total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
        payment_method = db.Column(db.String(50))
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('phorest_transaction_id', 'line_key', name='uq_sales_transaction_line'),
            db.Index('idx_sales_stylist_branch_date', 'stylist_user_id', 'phorest_branch_id', 'transaction_date'),
        )

        def __repr__(self):
            return f'<SalesTransaction {self.phorest_transaction_id}/{self.line_key} {self.total_amount}>'

    class DailySalesSummary(db.Model):
        """
        Per stylist, branch and day rollup of SalesTransaction rows

        total_revenue always equals the sum of total_amount over the
        transactions with the same stylist, branch and date.
        """
        __tablename__ = 'phorest_daily_sales_summary'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.String(50), nullable=False)
        phorest_branch_id = db.Column(db.String(100), nullable=False)
        location_id = db.Column(db.String(50), nullable=True)
        branch_name = db.Column(db.String(150))
        summary_date = db.Column(db.Date, nullable=False)
        total_services = db.Column(db.Integer, default=0)
        total_products = db.Column(db.Integer, default=0)
        service_revenue = db.Column(db.Numeric(12, 2), default=0)
        product_revenue = db.Column(db.Numeric(12, 2), default=0)
        total_revenue = db.Column(db.Numeric(12, 2), default=0)
        total_transactions = db.Column(db.Integer, default=0)
        total_discounts = db.Column(db.Numeric(12, 2), default=0)
        average_ticket = db.Column(db.Numeric(12, 2), default=0)
        created_at = db.Column(db.DateTime, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('user_id', 'phorest_branch_id', 'summary_date', name='uq_daily_sales_user_branch_date'),
            db.Index('idx_daily_sales_location_date', 'location_id', 'summary_date'),
        )

        def __repr__(self):
            return f'<DailySalesSummary {self.user_id} {self.phorest_branch_id} {self.summary_date}>'

    return SalesTransaction, DailySalesSummary
