from flask import Flask
from .config import Config
from .env import Env
from .extensions import cors, init_env
from .logging_config import setup_logging

__version__ = "0.1.0"


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # pytest captures log records itself
    if not app.testing:
        setup_logging(app.config["LOG_LEVEL"])

    # Extensions
    cors.init_app(app)
    init_env(app)

    # Blueprints
    from .routes.pages import bp as pages_bp
    from .routes.store_api import bp as store_api
    from .routes.db_api import bp as db_api

    app.register_blueprint(pages_bp)
    app.register_blueprint(store_api, url_prefix="/api")
    app.register_blueprint(db_api, url_prefix="/api")

    # CLI
    from .cli import register_commands

    register_commands(app)

    return app
