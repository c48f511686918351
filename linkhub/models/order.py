import datetime
import uuid
from ..extensions import db

ORDER_STATUSES = ("created", "verified", "failed")


class Order(db.Model):
    """A checkout attempt; mirrors one Razorpay order."""
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id'), nullable=False)
    billing_cycle = db.Column(db.String(10), nullable=False)
    promo_code = db.Column(db.String(50), nullable=True)

    amount = db.Column(db.Integer, nullable=False)  # minor units (paise)
    currency = db.Column(db.String(3), nullable=False, default='INR')

    gateway_order_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    gateway_payment_id = db.Column(db.String(255), nullable=True)
    gateway_signature = db.Column(db.String(512), nullable=True)

    status = db.Column(db.String(20), nullable=False, default='created')
    failure_reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f"<Order {self.gateway_order_id} - {self.status}>"
