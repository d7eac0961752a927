from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- AUTH / SCOPE ----------------
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_INVALID = "TOKEN_INVALID"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    USER_INACTIVE = "USER_INACTIVE"
    ROLE_NOT_PERMITTED = "ROLE_NOT_PERMITTED"
    BASE_SCOPE_VIOLATION = "BASE_SCOPE_VIOLATION"
    NO_BASE_ASSIGNED = "NO_BASE_ASSIGNED"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_EXISTS = "USER_EXISTS"
    USER_BASE_REQUIRED = "USER_BASE_REQUIRED"
    USER_SELF_DEACTIVATION = "USER_SELF_DEACTIVATION"

    # ---------------- BASES ----------------
    BASE_NOT_FOUND = "BASE_NOT_FOUND"
    BASE_INACTIVE = "BASE_INACTIVE"
    BASE_CODE_EXISTS = "BASE_CODE_EXISTS"
    BASE_INVALID_COMMANDER = "BASE_INVALID_COMMANDER"

    # ---------------- CATALOG / ASSETS ----------------
    ASSET_TYPE_NOT_FOUND = "ASSET_TYPE_NOT_FOUND"
    ASSET_TYPE_EXISTS = "ASSET_TYPE_EXISTS"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    ASSET_SERIAL_EXISTS = "ASSET_SERIAL_EXISTS"
    ASSET_NOT_AVAILABLE = "ASSET_NOT_AVAILABLE"
    ASSET_STATUS_LOCKED = "ASSET_STATUS_LOCKED"

    # ---------------- LEDGER / WORKFLOWS ----------------
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    PURCHASE_NOT_FOUND = "PURCHASE_NOT_FOUND"
    TRANSFER_NOT_FOUND = "TRANSFER_NOT_FOUND"
    TRANSFER_SAME_BASE = "TRANSFER_SAME_BASE"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    EXPENDITURE_NOT_FOUND = "EXPENDITURE_NOT_FOUND"
