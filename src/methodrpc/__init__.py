from .context import Context
from .errors import (
    MethodRpcError,
    RegistrationError,
    ReturnArityError,
    ReturnTypeError,
    ParameterArityError,
    ContextParameterError,
    PayloadTypeError,
    UnknownMethodError,
    DispatchError,
    DecodeError,
    EncodeError,
    MethodError,
)
from .service import Verb, MethodDescriptor, ServiceDescriptor, build_service
from .dispatch import execute
from .binder import bind_routes
from .policy import ErrorPolicy
from .server import create_app

__all__ = [
    "Context",
    "MethodRpcError",
    "RegistrationError",
    "ReturnArityError",
    "ReturnTypeError",
    "ParameterArityError",
    "ContextParameterError",
    "PayloadTypeError",
    "UnknownMethodError",
    "DispatchError",
    "DecodeError",
    "EncodeError",
    "MethodError",
    "Verb",
    "MethodDescriptor",
    "ServiceDescriptor",
    "build_service",
    "execute",
    "bind_routes",
    "ErrorPolicy",
    "create_app",
]
