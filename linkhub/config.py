import os
from dotenv import load_dotenv

load_dotenv()


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def _env_flag(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = _require_env("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = _require_env("DATABASE_URL")
    BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:5000")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_TTL = int(os.getenv("REDIS_TTL", 3600))
    # plan-limits payloads change on every create, keep them short-lived
    PLAN_LIMITS_CACHE_TTL = int(os.getenv("PLAN_LIMITS_CACHE_TTL", 30))

    # Razorpay
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
    RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")
    RAZORPAY_TIMEOUT = float(os.getenv("RAZORPAY_TIMEOUT", 10))
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")

    ACTIVATION_MAX_ATTEMPTS = int(os.getenv("ACTIVATION_MAX_ATTEMPTS", 3))

    # Missing tenant context lets actions through unless this is set.
    ENTITLEMENT_FAIL_CLOSED = _env_flag("ENTITLEMENT_FAIL_CLOSED", False)
