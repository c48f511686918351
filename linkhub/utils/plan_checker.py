# utils/plan_checker.py
import datetime
import enum
from dataclasses import asdict, dataclass

from flask import current_app

from ..extensions import db
from ..models.subscription import Subscription
from ..models.user import User
from ..services import cache
from ..services.usage_counter import UsageSnapshot, count_usage
from .plan_limits import FREE_LIMITS

PLAN_LIMITS_CACHE = "plan_limits"


class Action(str, enum.Enum):
    ADD_LINK = "addLink"
    ADD_PAGE = "addPage"
    ADD_BLOCK = "addBlock"
    ADD_SOCIAL = "addSocial"
    ADD_TEAM_MEMBER = "addTeamMember"
    USE_QR_CODE = "useQrCode"
    USE_ANALYTICS = "useAnalytics"


@dataclass(frozen=True)
class PlanLimits:
    plan_name: str | None
    has_active_plan: bool
    max_links: int
    max_pages: int
    max_blocks: int
    max_socials: int
    max_team_members: int
    qr_code_enabled: bool
    analytics_enabled: bool
    custom_templates_enabled: bool

    @classmethod
    def free(cls) -> "PlanLimits":
        return cls(plan_name=None, has_active_plan=False, **FREE_LIMITS)

    @classmethod
    def from_plan(cls, plan) -> "PlanLimits":
        return cls(
            plan_name=plan.name,
            has_active_plan=True,
            max_links=plan.max_links,
            max_pages=plan.max_pages,
            max_blocks=plan.max_blocks,
            max_socials=plan.max_socials,
            max_team_members=plan.max_team_members,
            qr_code_enabled=bool(plan.qr_code_enabled),
            analytics_enabled=bool(plan.analytics_enabled),
            custom_templates_enabled=bool(plan.custom_templates_enabled),
        )

    def as_dict(self) -> dict:
        return {
            "planName": self.plan_name,
            "hasActivePlan": self.has_active_plan,
            "maxLinks": self.max_links,
            "maxPages": self.max_pages,
            "maxBlocks": self.max_blocks,
            "maxSocials": self.max_socials,
            "maxTeamMembers": self.max_team_members,
            "qrCodeEnabled": self.qr_code_enabled,
            "analyticsEnabled": self.analytics_enabled,
            "customTemplatesEnabled": self.custom_templates_enabled,
        }


@dataclass(frozen=True)
class EntitlementDecision:
    allowed: bool
    message: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if data["message"] is None:
            del data["message"]
        return data


# action -> (usage field, limit field, label, upgrade tail)
_COUNT_RULES = {
    Action.ADD_LINK: ("links", "max_links", "link", "for more links"),
    Action.ADD_PAGE: ("pages", "max_pages", "page", "for more pages"),
    Action.ADD_BLOCK: ("blocks", "max_blocks", "block", "for more blocks"),
    Action.ADD_SOCIAL: ("socials", "max_socials", "social link", "for more social links"),
    Action.ADD_TEAM_MEMBER: ("team_members", "max_team_members", "team member", "to add more members"),
}

_FEATURE_RULES = {
    Action.USE_QR_CODE: ("qr_code_enabled", "QR Code"),
    Action.USE_ANALYTICS: ("analytics_enabled", "Analytics"),
}


def evaluate(action, usage: UsageSnapshot, limits: PlanLimits) -> EntitlementDecision:
    """Pure allow/deny for one action against a usage snapshot and plan limits."""
    try:
        action = Action(action)
    except ValueError:
        return EntitlementDecision(True)

    if action in _COUNT_RULES:
        usage_field, limit_field, label, tail = _COUNT_RULES[action]
        current = getattr(usage, usage_field)
        maximum = getattr(limits, limit_field)
        if current < maximum:
            return EntitlementDecision(True)
        return EntitlementDecision(
            False,
            f"You've reached your {label} limit ({current}/{maximum}). "
            f"Would you like to upgrade your plan {tail}?",
        )

    flag, label = _FEATURE_RULES[action]
    if getattr(limits, flag):
        return EntitlementDecision(True)
    return EntitlementDecision(False, f"{label} feature requires a paid plan. Would you like to upgrade?")


def current_subscription(tenant_id, now: datetime.datetime | None = None) -> Subscription | None:
    """The tenant's subscription if it is active and its period has not lapsed."""
    now = now or datetime.datetime.utcnow()
    sub = Subscription.query.filter_by(tenant_id=tenant_id).first()
    if not sub or sub.status != "active":
        return None
    if sub.current_period_end and sub.current_period_end <= now:
        return None
    return sub


def limits_for_tenant(tenant_id) -> PlanLimits:
    sub = current_subscription(tenant_id)
    if sub and sub.plan:
        return PlanLimits.from_plan(sub.plan)
    return PlanLimits.free()


def can_perform(tenant_id, action, usage: UsageSnapshot | None = None,
                limits: PlanLimits | None = None) -> EntitlementDecision:
    """
    Decide whether a tenant may perform `action`.
    Missing usage/limits are resolved from the database; an unknown tenant
    is let through unless ENTITLEMENT_FAIL_CLOSED is set.
    """
    if usage is None or limits is None:
        if tenant_id is None or db.session.get(User, tenant_id) is None:
            if current_app.config.get("ENTITLEMENT_FAIL_CLOSED"):
                return EntitlementDecision(False, "Unable to verify your plan. Please try again.")
            return EntitlementDecision(True)
        if usage is None:
            usage = count_usage(tenant_id)
        if limits is None:
            limits = limits_for_tenant(tenant_id)

    return evaluate(action, usage, limits)


def plan_limits_payload(tenant_id) -> dict:
    """UsageSnapshot merged with the plan limits, served from cache when warm."""
    cached = cache.get_cached(tenant_id, PLAN_LIMITS_CACHE)
    if cached is not None:
        return cached

    payload = {**limits_for_tenant(tenant_id).as_dict(), **count_usage(tenant_id).as_dict()}
    ttl = int(current_app.config.get("PLAN_LIMITS_CACHE_TTL", 30))
    cache.set_cached(tenant_id, PLAN_LIMITS_CACHE, payload, ttl)
    return payload


def invalidate_plan_limits(tenant_id):
    cache.invalidate(tenant_id, PLAN_LIMITS_CACHE)
