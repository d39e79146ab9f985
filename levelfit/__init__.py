"""LevelFit: fitness progression and penalty rules engine"""

__version__ = "0.1.0"
