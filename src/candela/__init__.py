"""Smooth display colour-temperature transitions driven by time of day."""

__all__ = [
    "Configuration",
    "Controller",
    "DaemonLoop",
    "Phase",
]

__version__ = "0.1.0"

from .config import Configuration
from .controller import Controller
from .daemon import DaemonLoop
from .schedule import Phase
