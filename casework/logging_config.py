from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level of the `casework` logger tree.

    Uvicorn installs the handlers; access decisions log under
    `casework.security.*` (DEBUG for allows, INFO for denials).
    """

    normalized = level.upper()
    logging.getLogger("casework").setLevel(normalized)
    logging.getLogger("casework").propagate = True
