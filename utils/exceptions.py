"""
Custom Exceptions
Error types shared across the fetch pipeline
"""
from typing import Optional


class AxiomQueryError(Exception):
    """Base error for axiom-query"""
    
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(AxiomQueryError):
    """Configuration could not be read or validated"""
    pass


class SessionError(AxiomQueryError):
    """Login against the reporting service failed"""
    pass


class FetchError(AxiomQueryError):
    """A report request failed"""
    
    def __init__(
        self,
        message: str,
        report_id: Optional[int] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, kwargs)
        self.report_id = report_id
        self.status_code = status_code


class ArtifactWriteError(AxiomQueryError):
    """A report payload could not be persisted"""
    
    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.path = path
