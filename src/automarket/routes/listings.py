import logging
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from sqlalchemy import delete
from sqlalchemy.orm import joinedload
from ..categories import Category
from ..errors import Forbidden, NotFound, ValidationError
from ..extensions import db
from ..persistence import build_update, count, execute, paginate
from ..security import current_identity
from ..utils import api_ok, json_body, page_args, pagination_meta

log = logging.getLogger("automarket.listings")


def get_listing_or_404(category: Category, listing_id: int):
    row = db.session.get(category.model, listing_id)
    if row is None:
        raise NotFound(f"{category.label} listing not found.")
    return row


def owned_listing_or_error(category: Category, listing_id: int, user_id: int, action: str):
    row = get_listing_or_404(category, listing_id)
    if row.seller_id != user_id:
        raise Forbidden(f"You don't have permission to {action} this listing.")
    return row


def make_blueprint(category: Category) -> Blueprint:
    """CRUD routes for one listing category, mounted under ``/api/<category.key>``."""
    bp = Blueprint(category.key, __name__)
    model = category.model
    base = f"/{category.key}"

    @bp.get(base)
    def list_listings():
        page, limit = page_args()
        conds = category.conditions(request.args)
        total = count(model, *conds)
        query = (
            model.query.options(joinedload(model.seller))
            .filter(*conds)
            .order_by(model.created_at.desc(), model.id.desc())
        )
        rows = paginate(query, page, limit)
        return api_ok(**{
            category.key: [category.serialize(r, seller=True) for r in rows],
            "pagination": pagination_meta(page, limit, total),
        })

    @bp.get(f"{base}/<int:listing_id>")
    def get_listing(listing_id):
        row = get_listing_or_404(category, listing_id)
        return api_ok(**{category.singular: category.serialize(row, seller=True, seller_email=True)})

    @bp.post(base)
    @jwt_required()
    def create_listing():
        identity = current_identity()
        values = category.creation_values(json_body())
        row = model(seller_id=identity.user_id, **values)
        db.session.add(row)
        db.session.commit()
        log.info("%s:created id=%s seller=%s", category.key, row.id, identity.user_id)
        return api_ok(201, **{
            "message": f"{category.label} listing created successfully",
            category.singular: category.serialize(row),
        })

    @bp.put(f"{base}/<int:listing_id>")
    @jwt_required()
    def update_listing(listing_id):
        identity = current_identity()
        owned_listing_or_error(category, listing_id, identity.user_id, "update")
        changes = category.update_values(json_body())
        if not changes:
            raise ValidationError("No fields to update.")
        execute(build_update(model, listing_id, changes))
        db.session.commit()
        row = db.session.get(model, listing_id)
        return api_ok(**{
            "message": f"{category.label} listing updated successfully",
            category.singular: category.serialize(row),
        })

    @bp.delete(f"{base}/<int:listing_id>")
    @jwt_required()
    def delete_listing(listing_id):
        identity = current_identity()
        owned_listing_or_error(category, listing_id, identity.user_id, "delete")
        # favorites and inquiries go with it (ON DELETE CASCADE)
        execute(delete(model).where(model.id == listing_id))
        db.session.commit()
        log.info("%s:deleted id=%s seller=%s", category.key, listing_id, identity.user_id)
        return api_ok(message=f"{category.label} listing deleted successfully")

    return bp
