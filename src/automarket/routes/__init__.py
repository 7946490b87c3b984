from ..categories import CATEGORIES
from .admin import bp as admin_bp
from .auth import bp as auth_bp
from .inquiries import bp as inquiries_bp
from .listings import make_blueprint
from .users import bp as users_bp


def register_blueprints(app):
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    for category in CATEGORIES.values():
        app.register_blueprint(make_blueprint(category), url_prefix="/api")
    app.register_blueprint(inquiries_bp, url_prefix="/api")
    app.register_blueprint(users_bp, url_prefix="/api/user")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
