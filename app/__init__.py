# app/__init__.py
import logging

from flask import Flask
from flask_wtf.csrf import CSRFProtect

from .models import db

csrf = CSRFProtect()


def create_app(config_class="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_class)
    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    csrf.init_app(app)

    from quote.providers import ProviderRegistry, RulesProvider

    # No live carrier adapters ship yet; every quote is priced by the rules table
    app.extensions["carrier_registry"] = ProviderRegistry(
        fallback=RulesProvider(table_path=app.config.get("RATE_TABLE_PATH") or None)
    )

    # Blueprints
    from .api import api_bp
    from .ui import ui_bp

    app.register_blueprint(api_bp, url_prefix=app.config.get("API_PREFIX", "/api"))
    app.register_blueprint(ui_bp)

    # JSON API is a machine interface; the UI forms carry CSRF tokens
    csrf.exempt(api_bp)

    with app.app_context():
        db.create_all()

    return app
