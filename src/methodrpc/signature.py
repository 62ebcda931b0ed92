from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .codec import is_request_type, is_response_type, type_name, unwrap_optional
from .context import Context
from .errors import (
    ContextParameterError,
    ParameterArityError,
    PayloadTypeError,
    RegistrationError,
    ReturnArityError,
    ReturnTypeError,
)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class MethodSignature:
    consumes_body: bool
    return_count: int
    request_type: Optional[Any] = None
    response_type: Optional[Any] = None
    nullable_response: bool = False


def _return_count(annotation) -> int:
    if annotation is inspect.Signature.empty:
        return 0
    if annotation is None:
        return 1
    if typing.get_origin(annotation) is tuple:
        return 1 + len(typing.get_args(annotation))
    return 2


def validate_signature(service_name: str, name: str, fn: Callable) -> MethodSignature:
    """
    Check `fn` (bound to its receiver) against the calling convention:

        (ctx: Context) -> None
        (ctx: Context) -> Response
        (ctx: Context, req: Request) -> None
        (ctx: Context, req: Request) -> Response

    Failure is signalled by raising, so the return annotation only tells
    whether a response payload follows. Rules are checked in order and the
    first violation is raised.
    """
    qualname = f"{service_name}.{name}"
    try:
        sig = inspect.signature(fn, eval_str=True)
    except (NameError, TypeError, SyntaxError) as e:
        raise RegistrationError(
            f"cannot resolve signature of api method {qualname}: {e}", service_name, name
        ) from e

    annotation = sig.return_annotation
    out = _return_count(annotation)
    if out < 1 or out > 2:
        raise ReturnArityError(
            f"Invalid number of return values for api method {qualname}: {out}",
            service_name, name,
        )

    response_type = None
    nullable = False
    if out == 2:
        response_type, nullable = unwrap_optional(annotation)
        if not is_response_type(response_type):
            raise ReturnTypeError(
                f"{qualname} should return None or a payload type and raise on failure. "
                f"Instead: {type_name(annotation)}",
                service_name, name,
            )

    params = list(sig.parameters.values())
    if any(p.kind not in _POSITIONAL for p in params) or not 1 <= len(params) <= 2:
        raise ParameterArityError(
            f"Invalid number of arguments for api method {qualname}: {len(params)}",
            service_name, name,
        )

    if params[0].annotation is not Context:
        got = params[0].annotation
        got = "nothing" if got is inspect.Parameter.empty else type_name(got)
        raise ContextParameterError(
            f"{qualname} should have first argument of type Context. Instead: {got}",
            service_name, name,
        )

    request_type = None
    if len(params) == 2:
        request_type = params[1].annotation
        if request_type is inspect.Parameter.empty or not is_request_type(request_type):
            got = "nothing" if request_type is inspect.Parameter.empty else type_name(request_type)
            raise PayloadTypeError(
                f"{qualname} request argument should be a dataclass, list or dict. Instead: {got}",
                service_name, name,
            )

    return MethodSignature(
        consumes_body=request_type is not None,
        return_count=out,
        request_type=request_type,
        response_type=response_type,
        nullable_response=nullable,
    )
