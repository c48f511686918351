# linkhub/__init__.py

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from linkhub.extensions import db, cors, init_redis
from linkhub.utils.error_handler import register_error_handlers


def create_app(config_object=None) -> Flask:
    app = Flask(__name__)

    # Load configuration
    if config_object is None:
        from linkhub.config import Config
        config_object = Config
    app.config.from_object(config_object)

    # Initialize extensions
    cors.init_app(app)
    db.init_app(app)
    init_redis(app)

    # Fix proxy headers
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    register_error_handlers(app)

    from linkhub.routes.core_routes import core_bp, pricing_bp, promo_bp
    from linkhub.routes.auth_routes import auth_bp
    from linkhub.routes.subscription_routes import payments_bp
    from linkhub.routes.resource_routes import resource_bp

    # Register blueprints
    app.register_blueprint(core_bp)
    app.register_blueprint(pricing_bp, url_prefix="/api/pricing")
    app.register_blueprint(promo_bp, url_prefix="/api/promo-codes")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(payments_bp, url_prefix="/api/payments")
    app.register_blueprint(resource_bp, url_prefix="/api")

    from linkhub.cli import register_commands
    register_commands(app)

    # Create tables if not exists
    with app.app_context():
        from linkhub.models.user import User  # noqa: F401
        from linkhub.models.plan import Plan  # noqa: F401
        from linkhub.models.subscription import Subscription  # noqa: F401
        from linkhub.models.order import Order  # noqa: F401
        from linkhub.models.promo_code import PromoCode  # noqa: F401
        from linkhub.models.resources import Link, Page, Block, Social, TeamMember  # noqa: F401
        db.create_all()

    return app
