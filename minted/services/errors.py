"""Errors raised by the Minted API client."""


class APIError(Exception):
    """Base class for every failure of an API client operation."""


class NoActiveSession(APIError):
    def __init__(self, message: str = "No active session. Sign in first.") -> None:
        super().__init__(message)


class Unauthorized(APIError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class BadRequest(APIError):
    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message)


class ServerError(APIError):
    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class InvalidResponse(APIError):
    def __init__(self, message: str = "Invalid response from server") -> None:
        super().__init__(message)


class DecodingError(APIError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Could not decode response: {cause}")
        self.cause = cause


class TransportError(APIError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Could not reach server: {cause}")
        self.cause = cause
