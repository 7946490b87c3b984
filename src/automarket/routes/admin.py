import logging
from flask import Blueprint
from sqlalchemy import delete
from ..categories import CATEGORIES, resolve_category
from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import ROLES, User
from ..persistence import build_update, execute
from ..security import admin_required, current_identity
from ..utils import api_ok, iso, json_body

bp = Blueprint("admin", __name__)
log = logging.getLogger("automarket.admin")


def serialize_admin_user(u: User):
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "phone": u.phone,
        "role": u.role,
        "created_at": iso(u.created_at),
        "updated_at": iso(u.updated_at),
    }


def tag_listing(category, row):
    """Listing as seen by the console: carries its category under ``category``."""
    data = category.serialize(row)
    if "category" in data:
        # a part's own category would otherwise be shadowed by the tag
        data["part_category"] = data["category"]
    data["category"] = category.key
    if not category.is_vehicle:
        data["model"] = row.name
        data["year"] = None
    return data


def _user_or_404(user_id):
    u = db.session.get(User, user_id)
    if u is None:
        raise NotFound("User not found.")
    return u


def _listing_or_404(category, listing_id):
    row = db.session.get(category.model, listing_id)
    if row is None:
        raise NotFound("Listing not found.")
    return row


# ---------- Users ----------
@bp.get("/users")
@admin_required
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return api_ok(users=[serialize_admin_user(u) for u in users])


@bp.get("/users/<int:user_id>")
@admin_required
def get_user(user_id):
    return api_ok(user=serialize_admin_user(_user_or_404(user_id)))


@bp.put("/users/<int:user_id>/role")
@admin_required
def update_user_role(user_id):
    role = json_body().get("role")
    if not role:
        raise ValidationError("Role is required.")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
    _user_or_404(user_id)
    execute(build_update(User, user_id, {"role": role}))
    db.session.commit()
    log.info("admin:role user=%s role=%s by=%s", user_id, role, current_identity().user_id)
    return api_ok(message="User role updated.", user=serialize_admin_user(db.session.get(User, user_id)))


@bp.delete("/users/<int:user_id>")
@admin_required
def delete_user(user_id):
    _user_or_404(user_id)
    # listings, favorites and inquiries cascade from users
    execute(delete(User).where(User.id == user_id))
    db.session.commit()
    log.info("admin:delete-user user=%s by=%s", user_id, current_identity().user_id)
    return api_ok(message="User deleted.")


# ---------- Listings ----------
@bp.get("/listings")
@admin_required
def list_all_listings():
    # Whole tables, merged and sorted in memory; no pagination on this view.
    rows = []
    for category in CATEGORIES.values():
        rows.extend((category, row) for row in category.model.query.all())
    rows.sort(key=lambda pair: (pair[1].created_at, pair[1].id), reverse=True)
    return api_ok(listings=[tag_listing(c, r) for c, r in rows])


@bp.get("/listings/<category>")
@admin_required
def list_category_listings(category):
    cat = resolve_category(category)
    model = cat.model
    rows = model.query.order_by(model.created_at.desc(), model.id.desc()).all()
    return api_ok(listings=[tag_listing(cat, r) for r in rows])


@bp.get("/listings/<category>/<int:listing_id>")
@admin_required
def get_any_listing(category, listing_id):
    cat = resolve_category(category)
    return api_ok(listing=tag_listing(cat, _listing_or_404(cat, listing_id)))


@bp.put("/listings/<category>/<int:listing_id>")
@admin_required
def update_any_listing(category, listing_id):
    cat = resolve_category(category)
    changes = cat.update_values(json_body())
    if not changes:
        raise ValidationError("No updatable fields provided.")
    _listing_or_404(cat, listing_id)
    execute(build_update(cat.model, listing_id, changes))
    db.session.commit()
    log.info("admin:update-listing %s/%s fields=%s", cat.key, listing_id, ",".join(sorted(changes)))
    return api_ok(
        message="Listing updated.",
        listing=tag_listing(cat, db.session.get(cat.model, listing_id)),
    )


@bp.delete("/listings/<category>/<int:listing_id>")
@admin_required
def delete_any_listing(category, listing_id):
    cat = resolve_category(category)
    _listing_or_404(cat, listing_id)
    execute(delete(cat.model).where(cat.model.id == listing_id))
    db.session.commit()
    log.info("admin:delete-listing %s/%s", cat.key, listing_id)
    return api_ok(message="Listing deleted.")
