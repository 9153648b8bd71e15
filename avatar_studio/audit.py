"""
Avatar studio: structured audit logging and log setup.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("avatar_studio.audit")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger("avatar_studio").setLevel(level.upper())


def audit_event(event: str, **kwargs: object) -> None:
    """Log a structured audit event."""
    logger.info("avatar_event=%s %s", event, kwargs)


def redact_key(key: str | None) -> str:
    """Show only the first five characters of a credential."""
    if not key:
        return "<unset>"
    return f"{key[:5]}..."
