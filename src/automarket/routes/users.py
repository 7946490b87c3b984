import logging
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ..categories import CATEGORIES, resolve_category
from ..errors import Conflict, NotFound, ValidationError
from ..extensions import db
from ..models import Car, Favorite, Inquiry, User
from ..persistence import build_update, count, execute, is_unique_violation, paginate
from ..security import current_identity
from ..utils import api_ok, iso, json_body, page_args, pagination_meta
from .auth import serialize_user

bp = Blueprint("users", __name__)
log = logging.getLogger("automarket.users")

ALREADY_FAVORITE = "Car is already in your favorites."
PROFILE_FIELDS = ("name", "phone")


def _favorite_exists(user_id, car_id):
    return Favorite.query.filter_by(user_id=user_id, car_id=car_id).first() is not None


def _current_user():
    u = db.session.get(User, current_identity().user_id)
    if not u:
        raise NotFound("User not found.")
    return u


@bp.get("/profile")
@jwt_required()
def get_profile():
    u = _current_user()
    total_listings = sum(
        count(c.model, c.model.seller_id == u.id) for c in CATEGORIES.values()
    )
    total_favorites = count(Favorite, Favorite.user_id == u.id)
    return api_ok(
        user=serialize_user(u),
        stats={"total_listings": total_listings, "total_favorites": total_favorites},
    )


@bp.put("/profile")
@jwt_required()
def update_profile():
    uid = current_identity().user_id
    data = json_body()
    changes = {
        name: (str(data[name]) if data[name] else None)
        for name in PROFILE_FIELDS
        if name in data
    }
    if not changes:
        raise ValidationError("No fields to update.")
    _current_user()
    execute(build_update(User, uid, changes))
    db.session.commit()
    return api_ok(message="Profile updated successfully", user=serialize_user(db.session.get(User, uid)))


# ---------- Favorites ----------
@bp.get("/favorites")
@jwt_required()
def list_favorites():
    uid = current_identity().user_id
    page, limit = page_args()
    total = count(Favorite, Favorite.user_id == uid)
    query = (
        Favorite.query.options(joinedload(Favorite.car).joinedload(Car.seller))
        .filter(Favorite.user_id == uid)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )
    cars = CATEGORIES["cars"]
    favorites = [
        {
            "favorite_id": f.id,
            "favorited_at": iso(f.created_at),
            "car": cars.serialize(f.car, seller=True),
        }
        for f in paginate(query, page, limit)
    ]
    return api_ok(favorites=favorites, pagination=pagination_meta(page, limit, total))


@bp.post("/favorites/<int:car_id>")
@jwt_required()
def add_favorite(car_id):
    uid = current_identity().user_id
    if db.session.get(Car, car_id) is None:
        raise NotFound("Car listing not found.")
    if _favorite_exists(uid, car_id):
        raise Conflict(ALREADY_FAVORITE)

    db.session.add(Favorite(user_id=uid, car_id=car_id))
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        # a concurrent request inserted the same pair first
        if is_unique_violation(e):
            raise Conflict(ALREADY_FAVORITE)
        log.exception("favorites:add failed user=%s car=%s", uid, car_id)
        raise
    return api_ok(201, message="Car added to favorites successfully")


@bp.delete("/favorites/<int:car_id>")
@jwt_required()
def remove_favorite(car_id):
    uid = current_identity().user_id
    if not _favorite_exists(uid, car_id):
        raise NotFound("Car is not in your favorites.")
    execute(delete(Favorite).where(Favorite.user_id == uid, Favorite.car_id == car_id))
    db.session.commit()
    return api_ok(message="Car removed from favorites successfully")


# ---------- Own listings ----------
@bp.get("/listings")
@jwt_required()
def my_listings():
    uid = current_identity().user_id
    category = resolve_category(request.args.get("category", "cars"))
    model = category.model
    page, limit = page_args()

    conds = [model.seller_id == uid]
    wanted = request.args.get("status")
    if wanted:
        conds.append(model.status == wanted)

    total = count(model, *conds)
    query = model.query.filter(*conds).order_by(model.created_at.desc(), model.id.desc())
    rows = paginate(query, page, limit)
    return api_ok(
        listings=[category.serialize(r) for r in rows],
        pagination=pagination_meta(page, limit, total),
    )


# ---------- Inquiries ----------
def serialize_inquiry(i: Inquiry):
    return {
        "id": i.id,
        "car_id": i.car_id,
        "buyer_id": i.buyer_id,
        "seller_id": i.seller_id,
        "message": i.message,
        "created_at": iso(i.created_at),
    }


@bp.get("/inquiries")
@jwt_required()
def my_inquiries():
    uid = current_identity().user_id
    box = request.args.get("box", "received")
    if box == "received":
        cond = Inquiry.seller_id == uid
    elif box == "sent":
        cond = Inquiry.buyer_id == uid
    else:
        raise ValidationError("box must be 'received' or 'sent'.")

    page, limit = page_args()
    total = count(Inquiry, cond)
    query = (
        Inquiry.query.options(joinedload(Inquiry.car), joinedload(Inquiry.buyer))
        .filter(cond)
        .order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
    )
    inquiries = []
    for i in paginate(query, page, limit):
        item = serialize_inquiry(i)
        item["car"] = {"id": i.car.id, "make": i.car.make, "model": i.car.model, "year": i.car.year}
        item["buyer"] = {"name": i.buyer.name, "email": i.buyer.email}
        inquiries.append(item)
    return api_ok(inquiries=inquiries, pagination=pagination_meta(page, limit, total))
