from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from flask import Flask

from .binder import bind_routes
from .config import ServerConfig
from .policy import ErrorPolicy
from .service import ServiceDescriptor


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once."""
    logger = logging.getLogger()
    if logger.handlers:
        return
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)


def _adopt_gunicorn_logging(app: Flask) -> None:
    gunicorn_error_logger = logging.getLogger("gunicorn.error")
    if gunicorn_error_logger.handlers:
        app.logger.handlers = gunicorn_error_logger.handlers
        app.logger.setLevel(gunicorn_error_logger.level)
        app.logger.propagate = False

        for name in ("werkzeug", "service", "dispatch", "profiling"):
            logging.getLogger(name).handlers = gunicorn_error_logger.handlers
            logging.getLogger(name).setLevel(gunicorn_error_logger.level)


def create_app(
    services: Iterable[Tuple[ServiceDescriptor, Optional[str]]] = (),
    config: ServerConfig | None = None,
    policy: ErrorPolicy | None = None,
    import_name: str = __name__,
) -> Flask:
    """
    Build a Flask app serving `services`, each a (descriptor, mount_path) pair.

    A `None` mount path falls back to the service's own path. The error
    policy is installed last so it covers every bound route.
    """
    config = config or ServerConfig()
    app = Flask(import_name)
    _adopt_gunicorn_logging(app)

    @app.route("/health", methods=["GET"])
    def health():
        return "OK", 200

    for service, mount_path in services:
        bind_routes(service, mount_path, app)

    policy = policy or ErrorPolicy(include_traceback=config.include_traceback)
    policy.install(app)
    app.extensions["methodrpc.policy"] = policy
    return app
