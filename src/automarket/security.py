import logging
from collections import namedtuple
from functools import wraps
from flask_jwt_extended import create_access_token, get_jwt, jwt_required
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from .extensions import db
from .errors import Forbidden, Unauthenticated
from .models import User
from .utils import api_error

log = logging.getLogger("automarket.security")

Identity = namedtuple("Identity", ["user_id", "email"])


def issue_token(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"userId": user.id, "email": user.email},
    )


def current_identity() -> Identity:
    """Identity of the verified token on the current request."""
    claims = get_jwt()
    raw = claims.get("userId", claims.get("sub"))
    try:
        user_id = int(raw)
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token: missing user identity.")
    return Identity(user_id, claims.get("email"))


def admin_required(fn):
    """jwt_required() plus a fresh role lookup; the role is not trusted from the token."""

    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):
        identity = current_identity()
        try:
            role = db.session.scalar(select(User.role).where(User.id == identity.user_id))
        except SQLAlchemyError:
            log.exception("admin guard lookup failed user_id=%s", identity.user_id)
            return api_error("Failed to verify admin role.", 500)
        if role != "admin":
            raise Forbidden("Admin access required.")
        return fn(*args, **kwargs)

    return wrapper
