"""Configuration-specific enumerations."""

from enum import Enum


class Discipline(str, Enum):
    """How the source runner schedules plugin invocations."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"
