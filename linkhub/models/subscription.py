import datetime
import uuid
from ..extensions import db

BILLING_CYCLES = ("monthly", "yearly")
SUBSCRIPTION_STATUSES = ("active", "pending", "cancelled", "expired")


class Subscription(db.Model):
    __tablename__ = 'subscriptions'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # one current subscription per tenant; activation overwrites this row
    tenant_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id'), nullable=False)
    billing_cycle = db.Column(db.String(10), nullable=False, default='monthly')
    status = db.Column(db.String(20), nullable=False, default='pending')

    current_period_start = db.Column(db.DateTime, nullable=True)
    current_period_end = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True)

    plan = db.relationship("Plan")

    def __repr__(self):
        return f"<Subscription {self.tenant_id} - {self.status}>"
