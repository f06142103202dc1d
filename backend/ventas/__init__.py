# backend/ventas/__init__.py
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .access import RECOVERY_SCREEN
from .config import Config
from .extensions import db, migrate



def create_app(config_object=None) -> Flask:
    """
    Application factory.

    config_object overrides Config; either a class/object read with
    from_object or a plain mapping (tests pass a dict).
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if isinstance(config_object, dict):
        app.config.update(config_object)
    elif config_object is not None:
        app.config.from_object(config_object)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.rpc import rpc_bp
    from .routes.auth import auth_bp
    from .routes.navigation import navigation_bp
    from .routes.dashboard import dashboard_bp
    from .routes.products import products_bp, categories_bp
    from .routes.contacts import customers_bp, suppliers_bp
    from .routes.sales import sales_bp, installments_bp
    from .routes.cash_register import cash_register_bp
    from .routes.settings import settings_bp
    from .routes.users import users_bp, roles_bp, audit_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(rpc_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(navigation_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(installments_bp)
    app.register_blueprint(cash_register_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(roles_bp)
    app.register_blueprint(audit_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        """
        Last-resort handler: any failure a route did not translate.

        HTTP errors (404, 405, ...) keep their normal responses; everything
        else is logged and answered with the recovery screen.
        """
        if isinstance(error, HTTPException):
            return error

        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": RECOVERY_SCREEN.message, "recovery": RECOVERY_SCREEN.to_dict()}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
