import logging
from flask import Blueprint
from flask_jwt_extended import jwt_required
from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import Car, Inquiry
from ..security import current_identity
from ..utils import api_ok, json_body
from .users import serialize_inquiry

bp = Blueprint("inquiries", __name__)
log = logging.getLogger("automarket.inquiries")


@bp.post("/cars/<int:car_id>/inquiries")
@jwt_required()
def send_inquiry(car_id):
    """Buyer -> seller message about a car. Inquiries are never edited or deleted."""
    uid = current_identity().user_id
    car = db.session.get(Car, car_id)
    if car is None:
        raise NotFound("Car listing not found.")
    if car.seller_id == uid:
        raise ValidationError("You cannot send an inquiry about your own listing.")

    message = str(json_body().get("message") or "").strip()
    if not message:
        raise ValidationError("Message is required.")

    inquiry = Inquiry(car_id=car.id, buyer_id=uid, seller_id=car.seller_id, message=message)
    db.session.add(inquiry)
    db.session.commit()
    log.info("inquiry:sent id=%s car=%s buyer=%s", inquiry.id, car.id, uid)
    return api_ok(201, message="Inquiry sent successfully", inquiry=serialize_inquiry(inquiry))
