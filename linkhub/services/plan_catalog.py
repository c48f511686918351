from typing import List

from ..extensions import db
from ..models.plan import Plan
from ..utils.errors import PlanNotFound
from ..utils.plan_limits import RESOURCES, display_limit


def list_active_plans() -> List[Plan]:
    """Active plans, cheapest first."""
    return (
        Plan.query.filter(Plan.is_active.is_(True))
        .order_by(Plan.monthly_price.asc(), Plan.yearly_price.asc(), Plan.sort_order.asc(), Plan.id.asc())
        .all()
    )


def get_plan(plan_id) -> Plan:
    """Resolve any plan by id, retired ones included (grandfathered tenants)."""
    plan = db.session.get(Plan, _coerce_id(plan_id))
    if not plan:
        raise PlanNotFound()
    return plan


def get_purchasable_plan(plan_id) -> Plan:
    plan = get_plan(plan_id)
    if not plan.is_active:
        raise PlanNotFound()
    return plan


def _coerce_id(plan_id):
    if isinstance(plan_id, bool):
        raise PlanNotFound()
    try:
        return int(plan_id)
    except (TypeError, ValueError):
        raise PlanNotFound()


def upsert_plan_definition(definition) -> Plan:
    """Insert or update a plan from a validated PlanDefinition, matched by name."""
    data = definition.as_model_kwargs()
    plan = Plan.query.filter_by(name=definition.name).first()
    if plan:
        for key, value in data.items():
            setattr(plan, key, value)
        return plan

    plan = Plan(**data)
    db.session.add(plan)
    return plan


def plan_to_dict(plan: Plan) -> dict:
    limits = {
        "links": plan.max_links,
        "pages": plan.max_pages,
        "blocks": plan.max_blocks,
        "socials": plan.max_socials,
        "team_members": plan.max_team_members,
    }
    return {
        "id": plan.id,
        "name": plan.name,
        "monthlyPrice": str(plan.monthly_price),
        "yearlyPrice": str(plan.yearly_price),
        "maxLinks": plan.max_links,
        "maxPages": plan.max_pages,
        "maxBlocks": plan.max_blocks,
        "maxSocials": plan.max_socials,
        "maxTeamMembers": plan.max_team_members,
        "qrCodeEnabled": plan.qr_code_enabled,
        "analyticsEnabled": plan.analytics_enabled,
        "customTemplatesEnabled": plan.custom_templates_enabled,
        "isActive": plan.is_active,
        "isFeatured": plan.is_featured,
        "limitsDisplay": {r: display_limit(r, limits[r]) for r in RESOURCES},
    }
