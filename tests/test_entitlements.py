import datetime

import pytest

from linkhub.extensions import db
from linkhub.models.resources import Block, Link, Page, Social, TeamMember
from linkhub.models.subscription import Subscription
from linkhub.services.usage_counter import UsageSnapshot, count_usage
from linkhub.utils.plan_checker import (
    Action,
    PlanLimits,
    can_perform,
    current_subscription,
    evaluate,
    limits_for_tenant,
)

LIMITS = PlanLimits(
    plan_name="Pro",
    has_active_plan=True,
    max_links=5,
    max_pages=2,
    max_blocks=10,
    max_socials=3,
    max_team_members=2,
    qr_code_enabled=False,
    analytics_enabled=True,
    custom_templates_enabled=False,
)

COUNT_ACTIONS = [
    (Action.ADD_LINK, "links", "max_links"),
    (Action.ADD_PAGE, "pages", "max_pages"),
    (Action.ADD_BLOCK, "blocks", "max_blocks"),
    (Action.ADD_SOCIAL, "socials", "max_socials"),
    (Action.ADD_TEAM_MEMBER, "team_members", "max_team_members"),
]


@pytest.mark.parametrize("action,usage_field,limit_field", COUNT_ACTIONS)
def test_count_actions_denied_exactly_at_the_limit(action, usage_field, limit_field):
    limit = getattr(LIMITS, limit_field)
    for current in (0, limit - 1, limit, limit + 1):
        decision = evaluate(action, UsageSnapshot(**{usage_field: current}), LIMITS)
        assert decision.allowed is (current < limit)
        if not decision.allowed:
            assert f"({current}/{limit})" in decision.message


def test_link_limit_message_matches_upgrade_prompt():
    decision = evaluate("addLink", UsageSnapshot(links=5), LIMITS)

    assert decision.allowed is False
    assert decision.message == (
        "You've reached your link limit (5/5). Would you like to upgrade your plan for more links?"
    )


def test_team_member_and_social_messages_name_the_resource():
    social = evaluate(Action.ADD_SOCIAL, UsageSnapshot(socials=3), LIMITS)
    member = evaluate(Action.ADD_TEAM_MEMBER, UsageSnapshot(team_members=2), LIMITS)

    assert "social link limit (3/3)" in social.message
    assert member.message.endswith("to add more members?")


def test_feature_actions_follow_plan_flags():
    qr = evaluate(Action.USE_QR_CODE, UsageSnapshot(), LIMITS)
    analytics = evaluate(Action.USE_ANALYTICS, UsageSnapshot(), LIMITS)

    assert qr.allowed is False
    assert qr.message == "QR Code feature requires a paid plan. Would you like to upgrade?"
    assert analytics.allowed is True
    assert analytics.to_dict() == {"allowed": True}


def test_unknown_action_is_allowed():
    assert evaluate("doSomethingNew", UsageSnapshot(), LIMITS).allowed is True


def test_missing_tenant_context_fails_open(app):
    assert can_perform(None, Action.ADD_LINK).allowed is True
    assert can_perform(9999, Action.USE_QR_CODE).allowed is True


def test_missing_tenant_context_fails_closed_when_configured(app):
    app.config["ENTITLEMENT_FAIL_CLOSED"] = True

    decision = can_perform(9999, Action.ADD_LINK)

    assert decision.allowed is False
    assert decision.message


def test_explicit_usage_and_limits_skip_lookup(app):
    decision = can_perform(None, Action.ADD_LINK, usage=UsageSnapshot(links=5), limits=LIMITS)
    assert decision.allowed is False


def test_usage_counter_applies_counting_rules(tenant):
    tid = tenant.id
    db.session.add_all([
        Link(user_id=tid, title="a", url="https://a.test"),
        Link(user_id=tid, title="b", url="https://b.test", active=False),
        Block(user_id=tid, type="text", active=True),
        Block(user_id=tid, type="text", active=False),
        Page(user_id=tid, title="Menu", slug="menu"),
        Page(user_id=tid, title="About", slug="about"),
        Social(user_id=tid, platform="instagram", url=""),
        TeamMember(owner_id=tid, email="a@x.test", status="active"),
        TeamMember(owner_id=tid, email="b@x.test", status="invited"),
        TeamMember(owner_id=tid, email="c@x.test", status="deactivated"),
        Link(user_id=tid + 1, title="other", url="https://o.test"),
    ])
    db.session.commit()

    assert count_usage(tid) == UsageSnapshot(links=1, pages=2, blocks=1, socials=1, team_members=2)


def test_tenant_without_subscription_gets_free_limits(tenant):
    limits = limits_for_tenant(tenant.id)

    assert limits.has_active_plan is False
    assert limits.max_links == 5
    assert limits.max_pages == 1
    assert limits.qr_code_enabled is False


def test_active_subscription_limits_apply_and_lapse_after_period(tenant, make_plan):
    plan = make_plan(max_links=50)
    now = datetime.datetime.utcnow()
    sub = Subscription(
        tenant_id=tenant.id, plan_id=plan.id, billing_cycle="monthly", status="active",
        current_period_start=now, current_period_end=now + datetime.timedelta(days=30),
    )
    db.session.add(sub)
    db.session.commit()

    assert limits_for_tenant(tenant.id).max_links == 50
    assert current_subscription(tenant.id, now=now + datetime.timedelta(days=31)) is None


def test_cancelled_subscription_falls_back_to_free(tenant, make_plan):
    plan = make_plan(max_links=50)
    db.session.add(Subscription(tenant_id=tenant.id, plan_id=plan.id, billing_cycle="monthly",
                                status="cancelled"))
    db.session.commit()

    assert limits_for_tenant(tenant.id).plan_name is None


def test_can_perform_counts_live_rows(tenant):
    for i in range(5):
        db.session.add(Link(user_id=tenant.id, title=f"l{i}", url="https://x.test"))
    db.session.commit()

    decision = can_perform(tenant.id, Action.ADD_LINK)

    assert decision.allowed is False
    assert "(5/5)" in decision.message
