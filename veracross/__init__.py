"""
Veracross Axiom client: session establishment and report fetching
"""
from .session import VeracrossSession, establish_session
from .report_fetcher import ReportFetcher

__all__ = [
    "VeracrossSession",
    "establish_session",
    "ReportFetcher",
]
