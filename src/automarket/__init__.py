import logging
from datetime import datetime, timezone
from flask import Flask, request
from .config import Config
from .extensions import db, migrate, bcrypt, jwt, cors
from .errors import register_error_handlers
from .routes import register_blueprints
from .cli import register_cli
from .utils import api_error, api_ok
from .persistence import enable_sqlite_foreign_keys

log = logging.getLogger("automarket.http")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def create_app(overrides=None):
    config = Config()
    images_dir = (overrides or {}).get("IMAGES_DIR", config.IMAGES_DIR)
    app = Flask(__name__, static_folder=images_dir, static_url_path="/images")
    app.config.from_object(config)
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Base extensions
    db.init_app(app)
    with app.app_context():
        enable_sqlite_foreign_keys(db.engine)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)

    allow_all = app.config["ALLOW_ALL_ORIGINS"]
    origins = "*" if allow_all else app.config["CORS_ORIGINS"]
    cors.init_app(
        app,
        resources={
            r"/api/*": {"origins": origins},
            r"/health": {"origins": origins},
        },
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
        supports_credentials=not allow_all,
    )

    @app.after_request
    def _security_headers(resp):
        for name, value in SECURITY_HEADERS.items():
            resp.headers.setdefault(name, value)
        log.info("%s %s %s", request.method, request.path, resp.status_code)
        return resp

    register_error_handlers(app)
    register_blueprints(app)

    @app.get("/health")
    def health():
        return api_ok(status="OK", timestamp=datetime.now(timezone.utc).isoformat())

    @app.get("/api/health")
    def api_health():
        return api_ok(status="OK", message="AutoMarket API is running!")

    # JWT failures are all 401 with the usual {error} body
    @jwt.unauthorized_loader
    def jwt_missing(reason):
        return api_error(f"Access token required: {reason}", 401)

    @jwt.invalid_token_loader
    def jwt_invalid(reason):
        return api_error(f"Invalid token: {reason}", 401)

    @jwt.expired_token_loader
    def jwt_expired(h, d):
        return api_error("Token expired.", 401)

    register_cli(app)
    return app
