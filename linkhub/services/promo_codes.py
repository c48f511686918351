import datetime
from dataclasses import dataclass
from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..models.promo_code import PromoCode
from ..utils.errors import InvalidPromoCode
from ..utils.money import to_decimal


@dataclass(frozen=True)
class PromoQuote:
    code: str
    discount_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "valid": True,
            "code": self.code,
            "discountPercent": float(self.discount_percent),
        }


def normalize_code(raw) -> str:
    return raw.strip().upper() if isinstance(raw, str) else ""


def validate(raw_code, now: datetime.datetime | None = None) -> PromoQuote:
    """
    Check a promo code without consuming it.
    Raises InvalidPromoCode when the code is unknown, switched off,
    used up or past its expiry.
    """
    code = normalize_code(raw_code)
    if not code:
        raise InvalidPromoCode("Invalid promo code")

    promo = PromoCode.query.filter_by(code=code).first()
    if not promo:
        raise InvalidPromoCode("Invalid promo code")
    if not promo.is_active:
        raise InvalidPromoCode("This promo code is no longer active")
    if promo.max_uses and promo.max_uses > 0 and (promo.current_uses or 0) >= promo.max_uses:
        raise InvalidPromoCode("This promo code has reached its usage limit")
    now = now or datetime.datetime.utcnow()
    if promo.expires_at and promo.expires_at < now:
        raise InvalidPromoCode("This promo code has expired")

    discount = to_decimal(promo.discount_percent)
    if discount < 0 or discount > 100:
        current_app.logger.error(f"Promo code {code} has out-of-range discount {discount}")
        raise InvalidPromoCode("Invalid promo code")

    return PromoQuote(code=promo.code, discount_percent=discount)


def consume(raw_code) -> bool:
    """
    Count one use of a promo code. Runs in its own transaction after
    activation; a failure here is logged and never undoes the activation.
    """
    code = normalize_code(raw_code)
    if not code:
        return False
    try:
        updated = (
            PromoCode.query.filter_by(code=code)
            .update({PromoCode.current_uses: PromoCode.current_uses + 1}, synchronize_session=False)
        )
        db.session.commit()
        if not updated:
            current_app.logger.warning(f"Promo code {code} vanished before it could be consumed")
        return bool(updated)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to consume promo code {code}: {e}")
        return False
