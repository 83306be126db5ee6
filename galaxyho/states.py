"""View state for galaxyho."""

import enum


class View(enum.Enum):
    """Which map the player is looking at."""

    GALAXY = "galaxy"
    SYSTEM = "system"
