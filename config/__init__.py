"""
Configuration Management Module
"""
from .settings import (
    Settings,
    VeracrossSettings,
    GeneralSettings,
    LoggingSettings,
)

__all__ = [
    "Settings",
    "VeracrossSettings",
    "GeneralSettings",
    "LoggingSettings",
]
