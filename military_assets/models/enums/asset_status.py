import enum


class AssetStatus(str, enum.Enum):
    available = "available"
    assigned = "assigned"
    maintenance = "maintenance"
    disposed = "disposed"
    transferred = "transferred"
    lost = "lost"
    damaged = "damaged"


class AssetCondition(str, enum.Enum):
    new = "new"
    good = "good"
    fair = "fair"
    poor = "poor"
    unserviceable = "unserviceable"
