from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- AUTH ----------------
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"

    # ---------------- USERS ----------------
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DEACTIVATE_USER = "DEACTIVATE_USER"

    # ---------------- BASES ----------------
    CREATE_BASE = "CREATE_BASE"
    UPDATE_BASE = "UPDATE_BASE"
    ACTIVATE_BASE = "ACTIVATE_BASE"
    DEACTIVATE_BASE = "DEACTIVATE_BASE"
    COMMANDER_HANDOVER = "COMMANDER_HANDOVER"

    # ---------------- CATALOG / ASSETS ----------------
    CREATE_ASSET_TYPE = "CREATE_ASSET_TYPE"
    UPDATE_ASSET_TYPE = "UPDATE_ASSET_TYPE"
    REGISTER_ASSET = "REGISTER_ASSET"
    UPDATE_ASSET = "UPDATE_ASSET"

    # ---------------- WORKFLOWS ----------------
    CREATE_PURCHASE = "CREATE_PURCHASE"
    CREATE_TRANSFER = "CREATE_TRANSFER"
    UPDATE_TRANSFER_STATUS = "UPDATE_TRANSFER_STATUS"
    CREATE_ASSIGNMENT = "CREATE_ASSIGNMENT"
    UPDATE_ASSIGNMENT_STATUS = "UPDATE_ASSIGNMENT_STATUS"
    CREATE_EXPENDITURE = "CREATE_EXPENDITURE"
