"""
Utils Module
Logging setup and shared exceptions
"""
from .logger import setup_logger
from .exceptions import (
    AxiomQueryError,
    ConfigurationError,
    SessionError,
    FetchError,
    ArtifactWriteError,
)

__all__ = [
    "setup_logger",
    "AxiomQueryError",
    "ConfigurationError",
    "SessionError",
    "FetchError",
    "ArtifactWriteError",
]
