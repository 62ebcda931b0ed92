class MethodRpcError(Exception):
    pass


class RegistrationError(MethodRpcError):
    """
    Raised while building or routing a service. Always a setup mistake.
    """
    def __init__(self, message: str, service: str | None = None, method: str | None = None):
        super().__init__(message)
        self.message = message
        self.service = service
        self.method = method


class ReturnArityError(RegistrationError):
    pass


class ReturnTypeError(RegistrationError):
    pass


class ParameterArityError(RegistrationError):
    pass


class ContextParameterError(RegistrationError):
    pass


class PayloadTypeError(RegistrationError):
    pass


class UnknownMethodError(RegistrationError):
    pass


class DispatchError(MethodRpcError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DecodeError(DispatchError):
    pass


class EncodeError(DispatchError):
    pass


class MethodError(MethodRpcError):
    """
    Raised by service methods that want to pick their own status and error code.
    """
    def __init__(self, code: str, message: str, http_status: int = 400):
        super().__init__(message)
        self.code = code
        self.http_status = http_status
        self.message = message

    def to_error_obj(self):
        return {"error": self.code, "message": self.message}
