from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Dict, Optional

from .dispatch import execute, make_view
from .context import Context
from .errors import RegistrationError, UnknownMethodError
from .signature import validate_signature

logger = logging.getLogger("service")


class Verb(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


@dataclass(eq=False)
class MethodDescriptor:
    service: ServiceDescriptor = field(repr=False)
    name: str
    bound_method: Callable[..., Any] = field(repr=False)
    consumes_body: bool
    return_count: int
    request_type: Optional[Any] = None
    response_type: Optional[Any] = None
    nullable_response: bool = False
    verb: Verb = Verb.GET
    path: str = ""

    def __post_init__(self):
        if not self.path:
            self.path = self.name

    @property
    def qualname(self) -> str:
        return f"{self.service.name}.{self.name}"

    def execute(self, ctx: Context) -> None:
        execute(self, ctx)

    def view(self):
        return make_view(self)


@dataclass(eq=False)
class ServiceDescriptor:
    name: str
    receiver: Any = field(repr=False)
    path: str = ""
    methods: Dict[str, MethodDescriptor] = field(default_factory=dict)

    def __post_init__(self):
        if not self.path:
            self.path = f"/{self.name}"

    def route(self, verb: Verb | str, path: str, method_name: str) -> None:
        m = self.methods.get(method_name)
        if m is None:
            raise UnknownMethodError(
                f"Service: {self.name} has no method named: {method_name}", self.name, method_name
            )
        try:
            verb = Verb(verb.upper() if isinstance(verb, str) else verb)
        except ValueError as e:
            raise RegistrationError(
                f"Unsupported verb {verb!r} for {self.name}.{method_name}", self.name, method_name
            ) from e
        m.verb = verb
        m.path = path

    def get(self, path: str, method_name: str) -> None:
        self.route(Verb.GET, path, method_name)

    def post(self, path: str, method_name: str) -> None:
        self.route(Verb.POST, path, method_name)

    def put(self, path: str, method_name: str) -> None:
        self.route(Verb.PUT, path, method_name)

    def __getitem__(self, method_name: str) -> MethodDescriptor:
        return self.methods[method_name]

    def __contains__(self, method_name: str) -> bool:
        return method_name in self.methods

    def __len__(self) -> int:
        return len(self.methods)


def _public_functions(cls) -> list[str]:
    return [
        name
        for name, _ in inspect.getmembers(cls, predicate=inspect.isroutine)
        if not name.startswith("_")
    ]


def build_service(service: Any) -> ServiceDescriptor:
    """
    Build the descriptor of every public method on `service`.

    Each method is validated against the calling convention; the first
    invalid one aborts the whole build, so no partially registered service
    ever exists.
    """
    if inspect.isclass(service):
        raise RegistrationError(
            f"build_service expects an instance, got the class {service.__name__}",
            service.__name__,
        )

    cls = type(service)
    name = cls.__name__
    methods: Dict[str, Any] = {}
    for method_name in _public_functions(cls):
        fn = getattr(service, method_name)
        methods[method_name] = (fn, validate_signature(name, method_name, fn))

    descriptor = ServiceDescriptor(name=name, receiver=service)
    for method_name, (fn, sig) in methods.items():
        descriptor.methods[method_name] = MethodDescriptor(
            service=descriptor,
            name=method_name,
            bound_method=fn,
            consumes_body=sig.consumes_body,
            return_count=sig.return_count,
            request_type=sig.request_type,
            response_type=sig.response_type,
            nullable_response=sig.nullable_response,
        )
        logger.debug(
            "registered %s.%s [in: %d, req: %s, resp: %s]",
            name, method_name, 2 if sig.consumes_body else 1,
            sig.request_type, sig.response_type,
        )
    return descriptor
