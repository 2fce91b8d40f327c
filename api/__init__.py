import logging

from flask import Flask, request
from flasgger import Swagger
from flask_cors import CORS

from .config import Settings, get_config
from .errors import register_error_handlers
from .sessions import SessionCoordinator
from models import DBStorage
from models.queries import RefreshTokenStore, UserStore

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Account Auth API",
        "version": "1.0.0",
        "description": "Registration, login and session renewal with access and refresh token cookies.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
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


def create_app(settings: Settings | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Settings are read from the environment only when none are passed in,
    and every component receives them at construction.
    """
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.config.from_object(get_config(settings.platform))

    # Only the configured client may make credentialed cross-origin requests
    CORS(app, resources={r"/api/*": {"origins": [settings.client_url]}}, supports_credentials=True)

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage = DBStorage(settings.database_url, echo=settings.sql_echo)
    storage.reload()
    refresh_tokens = RefreshTokenStore(storage, lifetime=settings.refresh_token_lifetime)
    app.extensions["settings"] = settings
    app.extensions["storage"] = storage
    app.extensions["sessions"] = SessionCoordinator(settings, UserStore(storage), refresh_tokens)

    from .health import bp as health_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(users_bp)

    @app.after_request
    def log_non_ok(response):
        if response.status_code >= 300:
            logger.warning("[NON-OK] %s %s - Status: %s", request.method, request.path, response.status_code)
        return response

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    return app
