from __future__ import annotations

from typing import Dict, List

from flask import Request, Response


class Context:
    """
    Per-request handle handed to every service method.

    Gives read access to the incoming request and buffered write access to
    the outgoing response. Nothing reaches the client until `to_response` is
    called, so a failing method never leaves a half-written body behind.
    """

    def __init__(self, request: Request, status: int = 200):
        self.request = request
        self.status = status
        self.headers: Dict[str, str] = {}
        self._chunks: List[bytes] = []

    def set_status(self, status: int) -> None:
        self.status = status

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._chunks.append(data)
        return len(data)

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def to_response(self) -> Response:
        return Response(self.body, status=self.status, headers=self.headers)

    def __repr__(self) -> str:
        return f"Context({self.request.method} {self.request.path}, status={self.status})"
