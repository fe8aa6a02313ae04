"""qbank_app package – application factory and blueprint registration."""

from __future__ import annotations

import os
from http import HTTPStatus
from time import perf_counter

import click
from flask import Flask, g, request
from flask_jwt_extended import JWTManager
from sqlalchemy import event, func

from config import resolve_config
from .blueprints import BLUEPRINTS
from .extensions import cors, db, jwt, limiter, migrate
from .gateway import init_backend
from .logging_config import assign_request_id, configure_logging
from .metrics import record_request
from .settings import BACKEND_SQL, BackendSettings, ConfigurationError
from .utils import ADMIN_ROLE, hash_password


def create_app(config_name: str | None = None) -> Flask:
    """Application factory used by both CLI and runtime servers."""

    app = Flask(__name__)
    _configure_app(app, config_name)
    configure_logging(app)
    _register_extensions(app)
    _register_backend(app)
    _register_blueprints(app)
    _register_shellcontext(app)
    _register_cli(app)
    _register_bootstrap(app)
    _register_request_hooks(app)

    return app


def _configure_app(app: Flask, config_name: str | None) -> None:
    env_name = config_name or os.getenv("FLASK_CONFIG")
    config_obj = resolve_config(env_name)
    app.config.from_object(config_obj)


def _register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _configure_jwt(jwt)
    _configure_sqlite_engine(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    app.config.setdefault(
        "RATELIMIT_DEFAULT", ";".join(app.config.get("RATE_LIMIT_DEFAULTS", []))
    )
    limiter.init_app(app)


def _register_backend(app: Flask) -> None:
    settings = BackendSettings.from_config(app.config)
    missing = settings.missing_options()
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if app.config.get("QBANK_STRICT_CONFIG"):
            raise ConfigurationError(message)
        app.logger.error(message)
    init_backend(app, settings)
    app.logger.info("Persistence backend ready", extra={"backend": settings.backend})


def _register_blueprints(app: Flask) -> None:
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)


def _register_shellcontext(app: Flask) -> None:
    from . import models  # noqa: F401
    from .gateway import get_backend

    @app.shell_context_processor
    def shell_context():
        return {"db": db, "backend": get_backend()}


def _configure_jwt(jwt_manager: JWTManager) -> None:
    from flask import jsonify

    from .models import User

    @jwt_manager.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        try:
            user_id = int(jwt_data["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return db.session.get(User, user_id)

    def unauthorized(message: str, **extra):
        return jsonify({"message": message, **extra}), HTTPStatus.UNAUTHORIZED

    jwt_manager.user_lookup_error_loader(lambda _header, _data: unauthorized("User not found"))
    jwt_manager.expired_token_loader(lambda _header, _data: unauthorized("Token has expired"))
    jwt_manager.invalid_token_loader(lambda error: unauthorized("Invalid token", error=error))
    jwt_manager.unauthorized_loader(lambda _error: unauthorized("Missing authorization token"))


def _register_bootstrap(app: Flask) -> None:
    if not app.config.get("AUTO_CREATE_SCHEMA"):
        return

    @app.before_request
    def ensure_schema():
        if app.config.get("_SCHEMA_READY"):
            return
        db.create_all()
        app.config["_SCHEMA_READY"] = True


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def start_request():
        assign_request_id()
        g.request_started_at = perf_counter()

    @app.after_request
    def finalize(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        started = getattr(g, "request_started_at", None)
        latency = perf_counter() - started if started else 0.0
        endpoint = request.endpoint or "unmatched"
        record_request(request.method, endpoint, response.status_code, latency)
        return response


def _configure_sqlite_engine(app: Flask) -> None:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite"):
        return
    busy_timeout_ms = int(app.config.get("SQLITE_BUSY_TIMEOUT_MS", 15000))

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):  # pragma: no cover
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON;")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms};")
            finally:
                cursor.close()


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db() -> None:
        """Create the user and question bank tables."""

        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-admin")
    @click.option("--username", required=True, help="Login name of the admin account.")
    @click.option("--name", default="Administrator", show_default=True)
    @click.password_option(help="Password for the admin account.")
    def create_admin(username: str, name: str, password: str) -> None:
        """Create an admin account, or promote an existing user to admin."""

        from .models import User

        if len(password) < 8:
            raise click.BadParameter("Password must be at least 8 characters.", param_hint="--password")

        db.create_all()
        username = username.strip().lower()
        user = User.query.filter(func.lower(User.username) == username).first()
        if user:
            user.role = ADMIN_ROLE
            user.password_hash = hash_password(password)
            db.session.commit()
            click.echo(f"Promoted {username} to admin.")
            return

        db.session.add(
            User(username=username, name=name, password_hash=hash_password(password), role=ADMIN_ROLE)
        )
        db.session.commit()
        click.echo(f"Created admin account {username}.")

    @app.cli.command("check-config")
    def check_config() -> None:
        """Report missing backend configuration options."""

        settings = BackendSettings.from_config(app.config)
        missing = settings.missing_options()
        if missing:
            raise click.ClickException(f"Missing: {', '.join(missing)}")
        click.echo(f"Backend '{settings.backend}' configuration is complete.")
        if settings.backend == BACKEND_SQL:
            click.echo(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
