# backend/backoffice/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate
from .events import ChangeFeed


def create_app(test_config=None) -> Flask:
    """
    Application factory.

    test_config (a mapping) is applied on top of Config before any extension
    is initialised, so tests can point SQLALCHEMY_DATABASE_URI elsewhere.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config is not None:
        app.config.update(test_config)

    app.logger.setLevel(str(app.config["LOG_LEVEL"]).upper())

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # One change feed per app instance
    app.extensions["change_feed"] = ChangeFeed()

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.users import users_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.regions import regions_bp
    from .routes.orders import orders_bp
    from .routes.leads import leads_bp, carts_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(regions_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(leads_bp)
    app.register_blueprint(carts_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = f"{app.config['IDENTITY_HEADER']}, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
