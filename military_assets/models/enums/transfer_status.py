import enum


class TransferStatus(str, enum.Enum):
    pending = "pending"
    in_transit = "in_transit"
    completed = "completed"
    cancelled = "cancelled"
