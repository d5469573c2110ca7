"""
Storage Module
"""
from .artifact_writer import ArtifactWriter

__all__ = [
    "ArtifactWriter",
]
