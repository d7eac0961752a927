import logging

ROOT = "military_assets"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the application namespace ("ledger" -> "military_assets.ledger")."""
    if name == ROOT or name.startswith(ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT}.{name}")
