from fastapi import HTTPException
from military_assets.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


# -------------------------
# TAXONOMY
# -------------------------
class ValidationError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.VALIDATION_ERROR, details: dict | None = None):
        super().__init__(400, message, error_code, details)


class UnauthorizedError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.UNAUTHORIZED, details: dict | None = None):
        super().__init__(401, message, error_code, details)


class ForbiddenError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.PERMISSION_DENIED, details: dict | None = None):
        super().__init__(403, message, error_code, details)


class NotFoundError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND, details: dict | None = None):
        super().__init__(404, message, error_code, details)


class ConflictError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.CONFLICT, details: dict | None = None):
        super().__init__(409, message, error_code, details)


class PersistenceError(AppException):
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(500, message, ErrorCode.PERSISTENCE_ERROR, details)


# -------------------------
# DOMAIN PRECONDITIONS
# -------------------------
class InsufficientBalance(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(400, message, ErrorCode.INSUFFICIENT_BALANCE, details)


class AssetNotAvailable(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(400, message, ErrorCode.ASSET_NOT_AVAILABLE, details)


class InvalidStateTransition(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(400, message, ErrorCode.INVALID_STATE_TRANSITION, details)
