"""
Report Fetcher
One authorized request per report, returning the raw payload
"""
import logging

import httpx

from utils.exceptions import FetchError
from .session import VeracrossSession


logger = logging.getLogger(__name__)


class ReportFetcher:
    """Fetches query result data through a shared session."""
    
    def __init__(self, session: VeracrossSession):
        self._session = session
    
    async def fetch(self, report_id: int) -> bytes:
        """
        Request result data for one report.
        
        Exactly one request is sent; nothing is retried here.
        
        Raises:
            FetchError: transport failure, non-2xx status or unreadable body
        """
        request = self._session.build_report_request(report_id)
        logger.debug(f"POST {request.url}")
        
        try:
            response = await self._session.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise FetchError(f"request failed: {exc}", report_id=report_id) from exc
        
        try:
            if not response.is_success:
                raise FetchError(
                    f"HTTP {response.status_code}",
                    report_id=report_id,
                    status_code=response.status_code,
                )
            try:
                body = await response.aread()
            except httpx.HTTPError as exc:
                raise FetchError(
                    f"reading response body failed: {exc}",
                    report_id=report_id,
                    status_code=response.status_code,
                ) from exc
        finally:
            await response.aclose()
        
        logger.debug(f"report {report_id}: received {len(body)} bytes")
        return body
