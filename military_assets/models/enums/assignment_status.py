import enum


class AssignmentStatus(str, enum.Enum):
    active = "active"
    returned = "returned"
    lost = "lost"
    damaged = "damaged"
