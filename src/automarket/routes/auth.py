import logging
import re
from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError
from ..errors import Conflict, NotFound, Unauthenticated, ValidationError
from ..extensions import db
from ..models import User
from ..persistence import is_unique_violation
from ..security import current_identity, issue_token
from ..utils import api_ok, iso, json_body

bp = Blueprint("auth", __name__)
log = logging.getLogger("automarket.auth")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
DUPLICATE_EMAIL = (
    "An account with this email already exists. "
    "Please use a different email or try logging in."
)


def serialize_user(u: User, with_role=False):
    data = {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "phone": u.phone,
        "created_at": iso(u.created_at),
        "updated_at": iso(u.updated_at),
    }
    if with_role:
        data["role"] = u.role
    return data


def _email_taken(email):
    return User.query.filter_by(email=email).first() is not None


def _check_password_rules(password, field="Password"):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{field} must be at least {MIN_PASSWORD_LENGTH} characters long.")


@bp.post("/register")
def register():
    data = json_body()
    email = str(data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email:
        raise ValidationError("Email is required.")
    if not password:
        raise ValidationError("Password is required.")
    if not isinstance(password, str):
        raise ValidationError("Password must be a string.")
    _check_password_rules(password)
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address.")
    if _email_taken(email):
        raise Conflict(DUPLICATE_EMAIL)

    # role is never taken from the request body
    u = User(email=email, name=data.get("name") or None, phone=data.get("phone") or None, role="user")
    u.set_password(password)
    db.session.add(u)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if is_unique_violation(e):
            raise Conflict(DUPLICATE_EMAIL)
        current_app.logger.exception("register failed email=%s", email)
        raise

    log.info("register:ok id=%s email=%s", u.id, u.email)
    return api_ok(
        201,
        message="User registered successfully",
        token=issue_token(u),
        user=serialize_user(u),
    )


@bp.post("/login")
def login():
    data = json_body()
    email = str(data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email:
        raise ValidationError("Email is required.")
    if not password:
        raise ValidationError("Password is required.")

    u = User.query.filter_by(email=email).first()
    if not u:
        log.info("login:notfound email=%s", email)
        raise Unauthenticated(
            "No account found with this email address. "
            "Please check your email or create a new account."
        )
    if not isinstance(password, str) or not u.check_password(password):
        log.info("login:badpass email=%s", email)
        raise Unauthenticated("Incorrect password. Please try again.")

    log.info("login:ok email=%s", email)
    return api_ok(message="Logged in successfully", token=issue_token(u), user=serialize_user(u))


@bp.get("/me")
@jwt_required()
def me():
    u = db.session.get(User, current_identity().user_id)
    if not u:
        raise NotFound("User not found.")
    return api_ok(user=serialize_user(u, with_role=True))


@bp.post("/change-password")
@jwt_required()
def change_password():
    data = json_body()
    current_pwd = data.get("current_password")
    new_pwd = data.get("new_password")
    if not current_pwd or not new_pwd:
        raise ValidationError("Missing fields (current_password, new_password).")
    if not isinstance(new_pwd, str):
        raise ValidationError("New password must be a string.")

    u = db.session.get(User, current_identity().user_id)
    if not u:
        raise NotFound("User not found.")
    if not isinstance(current_pwd, str) or not u.check_password(current_pwd):
        raise Unauthenticated("Current password is incorrect.")
    _check_password_rules(new_pwd, field="New password")

    u.set_password(new_pwd)
    db.session.commit()
    current_app.logger.info("password changed user_id=%s", u.id)
    return api_ok(message="Password updated successfully")
