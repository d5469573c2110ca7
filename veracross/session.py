"""
Veracross Session
Authenticated Axiom handle shared by every task of every round
"""
import logging
import re
from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import VeracrossSettings
from utils.exceptions import SessionError


logger = logging.getLogger(__name__)

_AUTHENTICITY_TOKEN_RE = re.compile(
    r'name=["\']authenticity_token["\'][^>]*?value=["\']([^"\']+)["\']'
    r'|value=["\']([^"\']+)["\'][^>]*?name=["\']authenticity_token["\']',
    re.IGNORECASE,
)
_CSRF_META_RE = re.compile(
    r'<meta[^>]*name=["\']csrf-token["\'][^>]*content=["\']([^"\']+)["\']'
    r'|<meta[^>]*content=["\']([^"\']+)["\'][^>]*name=["\']csrf-token["\']',
    re.IGNORECASE,
)

USER_AGENT = "axiom-query"


def _first_group(match: Optional[re.Match]) -> Optional[str]:
    if not match:
        return None
    return next((group for group in match.groups() if group), None)


def extract_authenticity_token(html: str) -> Optional[str]:
    """Read the hidden ``authenticity_token`` input of a login form."""
    return _first_group(_AUTHENTICITY_TOKEN_RE.search(html or ""))


def extract_csrf_token(html: str) -> Optional[str]:
    """Read the ``csrf-token`` meta tag of an Axiom page."""
    return _first_group(_CSRF_META_RE.search(html or ""))


class VeracrossSession:
    """
    Logged-in Axiom session.
    
    Holds the cookie-carrying HTTP client and the request token. Tasks only
    read from it; nothing renews the token once it is issued.
    """
    
    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        school: str,
        token: str,
        axiom_url: str,
    ):
        self._client = client
        self.school = school
        self.token = token
        self.axiom_url = axiom_url.rstrip("/")
    
    def report_url(self, report_id: int) -> str:
        return f"{self.axiom_url}/{self.school}/query/{int(report_id)}/result_data.json"
    
    def build_report_request(self, report_id: int) -> httpx.Request:
        return self._client.build_request(
            "POST",
            self.report_url(report_id),
            headers={"x-csrf-token": self.token},
        )
    
    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        return await self._client.send(request, stream=stream)
    
    async def aclose(self) -> None:
        await self._client.aclose()
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def _raise_for_login_status(response: httpx.Response, step: str) -> None:
    if response.status_code >= 400:
        raise SessionError(
            f"login {step} failed with HTTP {response.status_code}",
            {"url": str(response.url)},
        )


@retry(
    retry=retry_if_exception_type(httpx.TransportError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)
async def _login(client: httpx.AsyncClient, settings: VeracrossSettings) -> str:
    login_url = f"{settings.accounts_url}/{settings.school}/axiom/login"
    
    page = await client.get(login_url)
    _raise_for_login_status(page, "page")
    
    form = {
        "username": settings.username,
        "password": settings.password,
    }
    authenticity_token = extract_authenticity_token(page.text)
    if authenticity_token:
        form["authenticity_token"] = authenticity_token
    
    submitted = await client.post(login_url, data=form)
    _raise_for_login_status(submitted, "submit")
    
    landing = await client.get(f"{settings.axiom_url}/{settings.school}/")
    _raise_for_login_status(landing, "landing page")
    
    token = extract_csrf_token(landing.text)
    if not token:
        raise SessionError(
            "login rejected: no csrf token on the Axiom landing page",
            {"school": settings.school, "username": settings.username},
        )
    return token


async def establish_session(
    settings: VeracrossSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 30.0,
) -> VeracrossSession:
    """
    Log in to Veracross Axiom and return the shared session.
    
    Transport errors are retried a few times before giving up.
    
    Args:
        settings: credentials and service URLs
        transport: optional httpx transport (tests pass a MockTransport)
        timeout: per-request timeout for the HTTP client
        
    Raises:
        SessionError: the login could not be completed
    """
    if not settings.is_configured():
        raise SessionError("veracross username, password and school are required")
    
    client = httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )
    
    try:
        token = await _login(client, settings)
    except SessionError:
        await client.aclose()
        raise
    except httpx.HTTPError as exc:
        await client.aclose()
        raise SessionError(f"login request failed: {exc}", {"school": settings.school}) from exc
    
    logger.info(f"Logged in to Axiom as {settings.username} ({settings.school})")
    return VeracrossSession(
        client=client,
        school=str(settings.school),
        token=token,
        axiom_url=settings.axiom_url,
    )
