# utils/plan_limits.py
from dataclasses import dataclass, field, fields
from decimal import Decimal

PLAN_CONFIG_VERSION = 1

# at or above these a limit renders as "∞"
UNLIMITED_THRESHOLDS = {
    "links": 999,
    "blocks": 999,
    "pages": 99,
    "socials": 99,
    "team_members": 99,
}

RESOURCES = ("links", "pages", "blocks", "socials", "team_members")


class PlanConfigError(ValueError):
    pass


@dataclass(frozen=True)
class PlanDefinition:
    name: str
    monthly_price: Decimal
    yearly_price: Decimal
    max_links: int
    max_pages: int
    max_blocks: int
    max_socials: int
    max_team_members: int
    qr_code_enabled: bool = False
    analytics_enabled: bool = False
    custom_templates_enabled: bool = False
    is_active: bool = True
    is_featured: bool = False
    sort_order: int = 0

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise PlanConfigError("Plan name is required")
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.startswith("max_") and (not isinstance(value, int) or value < 0):
                raise PlanConfigError(f"{self.name}: {f.name} must be a non-negative integer")
        for price_field in ("monthly_price", "yearly_price"):
            price = Decimal(str(getattr(self, price_field)))
            if price < 0:
                raise PlanConfigError(f"{self.name}: {price_field} must be >= 0")
            object.__setattr__(self, price_field, price)

    def as_model_kwargs(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PlanCatalogConfig:
    version: int
    plans: tuple = field(default_factory=tuple)

    def __post_init__(self):
        if self.version != PLAN_CONFIG_VERSION:
            raise PlanConfigError(f"Unsupported plan config version {self.version}")
        names = [p.name.lower() for p in self.plans]
        if len(names) != len(set(names)):
            raise PlanConfigError("Duplicate plan names in catalog")


def load_plan_catalog(raw: dict) -> PlanCatalogConfig:
    """Validate a raw {"version", "plans": [...]} mapping into a catalog."""
    try:
        plans = tuple(PlanDefinition(**entry) for entry in raw.get("plans", []))
    except TypeError as exc:
        raise PlanConfigError(f"Malformed plan entry: {exc}") from exc
    return PlanCatalogConfig(version=raw.get("version", PLAN_CONFIG_VERSION), plans=plans)


# Limits for tenants without an active subscription
FREE_LIMITS = {
    "max_links": 5,
    "max_pages": 1,
    "max_team_members": 1,
    "max_blocks": 10,
    "max_socials": 3,
    "qr_code_enabled": False,
    "analytics_enabled": False,
    "custom_templates_enabled": False,
}

DEFAULT_PLAN_CATALOG = load_plan_catalog({
    "version": PLAN_CONFIG_VERSION,
    "plans": [
        {
            "name": "Free",
            "monthly_price": "0",
            "yearly_price": "0",
            "max_links": 5,
            "max_pages": 1,
            "max_blocks": 10,
            "max_socials": 3,
            "max_team_members": 1,
            "sort_order": 0,
        },
        {
            "name": "Pro",
            "monthly_price": "999",
            "yearly_price": "9999",
            "max_links": 50,
            "max_pages": 5,
            "max_blocks": 100,
            "max_socials": 15,
            "max_team_members": 5,
            "qr_code_enabled": True,
            "analytics_enabled": True,
            "is_featured": True,
            "sort_order": 1,
        },
        {
            "name": "Business",
            "monthly_price": "2499",
            "yearly_price": "24999",
            "max_links": 999,
            "max_pages": 99,
            "max_blocks": 999,
            "max_socials": 99,
            "max_team_members": 99,
            "qr_code_enabled": True,
            "analytics_enabled": True,
            "custom_templates_enabled": True,
            "sort_order": 2,
        },
    ],
})


def is_unlimited(resource: str, value) -> bool:
    threshold = UNLIMITED_THRESHOLDS.get(resource)
    return threshold is not None and value is not None and value >= threshold


def display_limit(resource: str, value):
    return "∞" if is_unlimited(resource, value) else value
