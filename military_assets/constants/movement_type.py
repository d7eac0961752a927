# military_assets/constants/movement_type.py

from enum import Enum


class MovementType(str, Enum):
    PURCHASE = "PURCHASE"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_IN_REVERSAL = "TRANSFER_IN_REVERSAL"
    TRANSFER_OUT_REVERSAL = "TRANSFER_OUT_REVERSAL"
    EXPENDITURE = "EXPENDITURE"
    ASSIGNMENT_RESERVE = "ASSIGNMENT_RESERVE"
    ASSIGNMENT_RELEASE = "ASSIGNMENT_RELEASE"
    ASSIGNMENT_WRITE_OFF = "ASSIGNMENT_WRITE_OFF"


class ReferenceType(str, Enum):
    PURCHASE = "PURCHASE"
    TRANSFER = "TRANSFER"
    EXPENDITURE = "EXPENDITURE"
    ASSIGNMENT = "ASSIGNMENT"
