# backend/stockflow/__init__.py
import logging

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate
from .errors import StockFlowError
from .responses import failure, from_error
from .services.write_unit import current_write_mode


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("stockflow").setLevel(level)
    app.logger.setLevel(level)


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    # Fail fast on a misconfigured write mode
    with app.app_context():
        current_write_mode()

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.categories import categories_bp
    from .routes.sales import sales_bp
    from .routes.purchases import purchases_bp
    from .routes.barcode import barcode_bp
    from .routes.customers import customers_bp
    from .routes.suppliers import suppliers_bp
    from .routes.alerts import alerts_bp
    from .routes.settings import settings_bp
    from .routes.dashboard import dashboard_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(sales_bp, name="bills", url_prefix="/api/v1/bills")  # legacy path
    app.register_blueprint(purchases_bp)
    app.register_blueprint(barcode_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.errorhandler(404)
    def not_found(_error):
        return failure("Route not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return failure("Method not allowed", 405)

    @app.errorhandler(StockFlowError)
    def stockflow_error(error):
        db.session.rollback()
        return from_error(error)

    @app.errorhandler(Exception)
    def unhandled_error(error):
        if isinstance(error, HTTPException):
            return failure(error.description or error.name, error.code)
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return failure("Server error", 500)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
