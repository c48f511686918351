import datetime
from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models.promo_code import PromoCode
from .services.plan_catalog import upsert_plan_definition
from .services.promo_codes import normalize_code
from .utils.plan_limits import DEFAULT_PLAN_CATALOG


@click.command("seed-plans")
@with_appcontext
def seed_plans():
    """Upsert the default plan catalog by plan name."""
    for definition in DEFAULT_PLAN_CATALOG.plans:
        upsert_plan_definition(definition)
    db.session.commit()
    click.echo(f"Seeded plans: {[p.name for p in DEFAULT_PLAN_CATALOG.plans]}")


@click.command("create-promo")
@click.argument("code")
@click.argument("discount_percent", type=click.FloatRange(0, 100))
@click.option("--max-uses", type=click.IntRange(min=0), default=None, help="0 or unset for unlimited.")
@click.option("--expires-in-days", type=click.IntRange(min=1), default=None)
@with_appcontext
def create_promo(code, discount_percent, max_uses, expires_in_days):
    """Create a promo code (stored upper-case)."""
    code = normalize_code(code)
    if PromoCode.query.filter_by(code=code).first():
        raise click.ClickException(f"Promo code {code} already exists")

    expires_at = None
    if expires_in_days:
        expires_at = datetime.datetime.utcnow() + datetime.timedelta(days=expires_in_days)

    db.session.add(PromoCode(
        code=code,
        discount_percent=Decimal(str(discount_percent)),
        max_uses=max_uses,
        expires_at=expires_at,
    ))
    db.session.commit()
    click.echo(f"Created promo code {code} ({discount_percent}% off)")


def register_commands(app):
    app.cli.add_command(seed_plans)
    app.cli.add_command(create_promo)
