from __future__ import annotations

import logging

from flask import Blueprint, Flask

from .service import ServiceDescriptor

logger = logging.getLogger("service")


def bind_routes(
    service: ServiceDescriptor,
    mount_path: str | None,
    router: Flask | Blueprint,
    name: str | None = None,
) -> Blueprint:
    """
    Register every method of `service` on `router` under `mount_path`.

    The methods are grouped in a blueprint named after the service (or `name`,
    which is needed to mount the same service twice). Errors raised by Flask
    while registering propagate as is.
    """
    mount_path = service.path if mount_path is None else mount_path
    bp = Blueprint(name or service.name, __name__, url_prefix=mount_path or None)
    for m in service.methods.values():
        rule = m.path if mount_path else "/" + m.path.lstrip("/")
        logger.info("%s %s%s %s", m.verb, mount_path, m.path, m.qualname)
        bp.add_url_rule(rule, endpoint=m.name, view_func=m.view(), methods=[str(m.verb)])
    router.register_blueprint(bp)
    return bp
