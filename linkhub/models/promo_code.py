import datetime
from ..extensions import db


class PromoCode(db.Model):
    __tablename__ = 'promo_codes'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)  # stored upper-case
    discount_percent = db.Column(db.Numeric(5, 2), nullable=False)  # 0-100
    max_uses = db.Column(db.Integer, nullable=True)  # None/0 = unlimited
    current_uses = db.Column(db.Integer, nullable=False, default=0)
    expires_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PromoCode {self.code}>"
