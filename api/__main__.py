"""
Entrypoint for running the API in development.
In production run create_app() behind a WSGI server (gunicorn/uwsgi).
"""
import logging
import os

from . import create_app
from .config import Settings

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

settings = Settings.from_env()
app = create_app(settings)

if __name__ == "__main__":
    logging.getLogger(__name__).info("Server listening on %s:%s", settings.base_url, settings.port)
    app.run(host=os.getenv("FLASK_RUN_HOST", "0.0.0.0"), port=settings.port, debug=app.config.get("DEBUG", False))
