from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from utils.logging import get_logger

API_PREFIX = "/api/v1"

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Storefront API",
        "version": "1.0.0",
        "description": "Catalog browsing, authenticated cart management and admin operations.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    logger = get_logger("api")
    logger.setLevel(app.config["LOG_LEVEL"].upper())

    # Cookies carry the session, so credentials must be allowed cross-origin
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform error envelope for every failure
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .products import bp as products_bp
    from .collections import bp as collections_bp
    from .cart import bp as cart_bp
    from .admin import bp as admin_bp

    # a prefix given here replaces the blueprint's own, so join them
    for bp in (health_bp, auth_bp, users_bp, products_bp, collections_bp, cart_bp, admin_bp):
        app.register_blueprint(bp, url_prefix=API_PREFIX + (bp.url_prefix or ""))

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Storefront API is running",
            "docs": "/apidocs/",
            "health": f"{API_PREFIX}/health",
        }, 200

    logger.info("Storefront API created (%s)", app.config["APP_ENV"])
    return app
