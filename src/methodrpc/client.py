from __future__ import annotations

import functools
from typing import Any, Optional

import requests

from .codec import decode_value, encode_value


class ClientError(Exception):
    def __init__(self, code, message):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


def retry(fn):
    """
    Retries the decorated method up to `retry` times (default 0) on ClientError
    """
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        retry = int(kwargs.get("retry", 0) or 0)
        last_exc: Exception | None = None

        for _ in range(retry + 1):  # total attempts = 1 + retry
            try:
                return fn(*args, **kwargs)
            except ClientError as e:
                last_exc = e

        assert last_exc is not None
        raise last_exc
    return wrapper


class ServiceClient:
    """
    A simple client for services exposed with `bind_routes`.
    """
    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def health(self, timeout: float = 5) -> bool:
        try:
            response = self.session.get(self._url("/health"), timeout=timeout)
        except requests.RequestException:
            return False
        return response.status_code == 200 and response.text.strip() == "OK"

    @retry
    def call(self, verb: str, path: str, payload: Any = None, response_type: Any = None, timeout: float = 60, retry: int = 0) -> Any:
        """
        Send `payload` as JSON and decode the reply into `response_type`.

        Without a `response_type` the parsed JSON is returned as is, or None
        when the reply has no body.
        """
        body = None if payload is None else encode_value(payload)
        response = self.session.request(verb.upper(), self._url(path), json=body, timeout=timeout)
        if response.status_code != 200:
            raise ClientError(response.status_code, response.text)
        if not response.content.strip():
            return None
        output = response.json()
        if response_type is None:
            return output
        return decode_value(response_type, output)

    def get(self, path: str, payload: Any = None, response_type: Any = None, **kwargs) -> Any:
        return self.call("GET", path, payload, response_type, **kwargs)

    def post(self, path: str, payload: Any = None, response_type: Any = None, **kwargs) -> Any:
        return self.call("POST", path, payload, response_type, **kwargs)

    def put(self, path: str, payload: Any = None, response_type: Any = None, **kwargs) -> Any:
        return self.call("PUT", path, payload, response_type, **kwargs)
