import json
import re
from urllib.parse import urlparse

from flask import Blueprint, Response, request

from ..extensions import db
from ..models.resources import Block, Link, Page, Social, TeamMember
from ..utils.plan_checker import Action, can_perform, invalidate_plan_limits
from ..utils.qr_generator import generate_profile_qr
from ..utils.response import api_response
from .auth_routes import token_required

resource_bp = Blueprint("resources", __name__)

SLUG_RE = re.compile(r"^[a-z0-9-]{1,100}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _denied(decision):
    return api_response(False, decision.message, {"allowed": False, "upgradeRequired": True}, 403)


def _created(message, data):
    return api_response(True, message, data, 201)


def _normalize_url(raw: str) -> str:
    url = (raw or "").strip()
    if url and not urlparse(url).scheme:
        url = "https://" + url
    return url


@resource_bp.route('/links', methods=['POST'])
@token_required
def create_link(current_user):
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    url = _normalize_url(data.get("url"))

    if not title or len(title) > 100:
        return api_response(False, "Title is required (max 100 characters)", None, 400)
    if not url:
        return api_response(False, "url is required", None, 400)

    decision = can_perform(current_user.id, Action.ADD_LINK)
    if not decision.allowed:
        return _denied(decision)

    position = Link.query.filter_by(user_id=current_user.id).count()
    link = Link(user_id=current_user.id, title=title, url=url, position=position)
    db.session.add(link)
    db.session.commit()
    invalidate_plan_limits(current_user.id)

    return _created("Link created", {
        "id": link.id,
        "title": link.title,
        "url": link.url,
        "position": link.position,
        "active": link.active,
    })


@resource_bp.route('/pages', methods=['POST'])
@token_required
def create_page(current_user):
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    slug = (data.get("slug") or "").strip().lower()

    if not title:
        return api_response(False, "Title is required", None, 400)
    if not SLUG_RE.match(slug):
        return api_response(False, "Slug may only contain lowercase letters, numbers and hyphens", None, 400)

    decision = can_perform(current_user.id, Action.ADD_PAGE)
    if not decision.allowed:
        return _denied(decision)

    if Page.query.filter_by(user_id=current_user.id, slug=slug).first():
        return api_response(False, "A page with this slug already exists", None, 400)

    page = Page(user_id=current_user.id, title=title, slug=slug)
    db.session.add(page)
    db.session.commit()
    invalidate_plan_limits(current_user.id)

    return _created("Page created", {"id": page.id, "title": page.title, "slug": page.slug})


@resource_bp.route('/blocks', methods=['POST'])
@token_required
def create_block(current_user):
    data = request.get_json(silent=True) or {}
    block_type = (data.get("type") or "").strip()
    page_id = data.get("pageId")

    if not block_type:
        return api_response(False, "Block type is required", None, 400)
    if page_id is not None and not Page.query.filter_by(id=page_id, user_id=current_user.id).first():
        return api_response(False, "Page not found", None, 404)

    decision = can_perform(current_user.id, Action.ADD_BLOCK)
    if not decision.allowed:
        return _denied(decision)

    position = Block.query.filter_by(user_id=current_user.id, page_id=page_id).count()
    block = Block(
        user_id=current_user.id,
        page_id=page_id,
        type=block_type,
        content=json.dumps(data.get("content") or {}),
        position=position,
    )
    db.session.add(block)
    db.session.commit()
    invalidate_plan_limits(current_user.id)

    return _created("Block created", {
        "id": block.id,
        "type": block.type,
        "pageId": block.page_id,
        "position": block.position,
    })


@resource_bp.route('/socials', methods=['POST'])
@token_required
def create_social(current_user):
    data = request.get_json(silent=True) or {}
    platform = (data.get("platform") or "").strip().lower()

    if not platform:
        return api_response(False, "Platform is required", None, 400)

    decision = can_perform(current_user.id, Action.ADD_SOCIAL)
    if not decision.allowed:
        return _denied(decision)

    position = Social.query.filter_by(user_id=current_user.id).count()
    social = Social(user_id=current_user.id, platform=platform, url=(data.get("url") or "").strip(),
                    position=position)
    db.session.add(social)
    db.session.commit()
    invalidate_plan_limits(current_user.id)

    return _created("Social link added", {"id": social.id, "platform": social.platform, "url": social.url})


@resource_bp.route('/team/members', methods=['POST'])
@token_required
def invite_team_member(current_user):
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()

    if not EMAIL_RE.match(email):
        return api_response(False, "A valid email is required", None, 400)

    decision = can_perform(current_user.id, Action.ADD_TEAM_MEMBER)
    if not decision.allowed:
        return _denied(decision)

    existing = TeamMember.query.filter(
        TeamMember.owner_id == current_user.id,
        TeamMember.email == email,
        TeamMember.status != "deactivated",
    ).first()
    if existing:
        return api_response(False, "This person is already on your team", None, 400)

    member = TeamMember(owner_id=current_user.id, email=email, role=data.get("role") or "member")
    db.session.add(member)
    db.session.commit()
    invalidate_plan_limits(current_user.id)

    return _created("Invitation sent", {
        "id": member.id,
        "email": member.email,
        "role": member.role,
        "status": member.status,
    })


@resource_bp.route('/qr-code', methods=['GET'])
@token_required
def profile_qr_code(current_user):
    decision = can_perform(current_user.id, Action.USE_QR_CODE)
    if not decision.allowed:
        return _denied(decision)

    png = generate_profile_qr(
        current_user.username,
        color_dark=request.args.get("color", "#000000"),
        style=request.args.get("style", "square"),
    )
    return Response(png, mimetype="image/png")
