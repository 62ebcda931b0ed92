from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from typing import Dict, Tuple, Type

from flask import Flask, current_app, jsonify
from werkzeug.exceptions import HTTPException

from .errors import DecodeError, EncodeError, MethodError


def _traceback_str(e: Exception) -> str:
    return "".join(traceback.format_exception(type(e), e, e.__traceback__))


def _json_error(error_code: str, message: str, status: int, exc: Exception | None = None):
    payload = {"error": error_code, "message": message}
    if exc is not None:
        payload["traceback"] = _traceback_str(exc)
    return jsonify(payload), status


def _default_mapping() -> Dict[Type[BaseException], Tuple[int, str]]:
    return {
        DecodeError: (400, "bad_request"),
        EncodeError: (500, "encode_error"),
        Exception: (500, "internal_error"),
    }


@dataclass
class ErrorPolicy:
    """
    Maps exceptions escaping a service method to an HTTP status and a JSON body.

    The most specific registered class in the exception's MRO wins.
    `MethodError` carries its own status and code; werkzeug HTTP errors
    (404, 405, ...) are passed through to Flask.
    """
    mapping: Dict[Type[BaseException], Tuple[int, str]] = field(default_factory=_default_mapping)
    include_traceback: bool = False

    def register(self, exc_type: Type[BaseException], status: int, code: str) -> None:
        self.mapping[exc_type] = (status, code)

    def resolve(self, e: BaseException) -> Tuple[int, str]:
        if isinstance(e, MethodError):
            return e.http_status, e.code
        for klass in type(e).__mro__:
            if klass in self.mapping:
                return self.mapping[klass]
        return 500, "internal_error"

    def handle(self, e: Exception):
        if isinstance(e, HTTPException):
            return e
        status, code = self.resolve(e)
        current_app.logger.error("%s (%s) while serving request", type(e).__name__, code, exc_info=e)
        return _json_error(code, str(e), status, e if self.include_traceback else None)

    def install(self, app: Flask) -> None:
        app.register_error_handler(Exception, self.handle)
