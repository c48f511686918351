import datetime
from ..extensions import db


class Plan(db.Model):
    __tablename__ = 'plans'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False, unique=True)  # Free, Pro, Business
    monthly_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    yearly_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    # Limits (>= 999 links / >= 99 pages, members means unlimited)
    max_links = db.Column(db.Integer, nullable=False, default=5)
    max_pages = db.Column(db.Integer, nullable=False, default=1)
    max_blocks = db.Column(db.Integer, nullable=False, default=10)
    max_socials = db.Column(db.Integer, nullable=False, default=3)
    max_team_members = db.Column(db.Integer, nullable=False, default=1)

    # Features
    qr_code_enabled = db.Column(db.Boolean, nullable=False, default=False)
    analytics_enabled = db.Column(db.Boolean, nullable=False, default=False)
    custom_templates_enabled = db.Column(db.Boolean, nullable=False, default=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Plan {self.name}>"
