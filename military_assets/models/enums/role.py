import enum


class Role(str, enum.Enum):
    admin = "admin"
    base_commander = "base_commander"
    logistics_officer = "logistics_officer"
