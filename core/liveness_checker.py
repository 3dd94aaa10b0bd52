# core/liveness_checker.py
import asyncio
import logging
from typing import Optional, Tuple
import httpx
from config.settings import settings
from model.certificate import LivenessResult
from util.timing import timed

logger = logging.getLogger(__name__)

INACCESSIBLE_NOTE = "URL exists but could not be accessed (may require authentication)"

# Values vision models write when a certificate carries no URL.
_URL_SENTINELS = {"", "not found", "none"}


def has_verification_url(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() not in _URL_SENTINELS


def _with_scheme(url: str) -> str:
    url = url.strip()
    if "://" not in url:
        return f"https://{url}"
    return url


def name_on_page(page: str, expected_name: str) -> bool:
    """
    True when ANY token of the expected name occurs in the page body.
    Deliberately loose: portals often print only a first name or an initial.
    """
    body = page.lower()
    return any(token in body for token in expected_name.lower().split())


def _decode(body: bytes, charset: Optional[str]) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class LivenessChecker:
    """
    Fetches a certificate's verification URL once and reports what it saw.
    Never raises: unreachable, slow or auth-walled pages are results, not errors.
    The whole exchange is bounded by `timeout` and at most `max_bytes` of the
    body are read.
    """

    def __init__(
        self,
        timeout: float = settings.LIVENESS_TIMEOUT_SECONDS,
        user_agent: str = settings.LIVENESS_USER_AGENT,
        max_bytes: int = settings.LIVENESS_MAX_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        self._max_bytes = max_bytes
        self._transport = transport

    async def _fetch(self, target: str) -> Tuple[int, str]:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
            headers={"User-Agent": self._user_agent},
        ) as client:
            async with client.stream("GET", target) as r:
                if r.status_code != 200:
                    return r.status_code, ""
                body = bytearray()
                async for chunk in r.aiter_bytes():
                    body.extend(chunk)
                    if len(body) >= self._max_bytes:
                        break
                return 200, _decode(bytes(body[: self._max_bytes]), r.charset_encoding)

    async def check_url(self, url: str, expected_name: str) -> LivenessResult:
        target = _with_scheme(url)
        try:
            with timed(logger, "liveness.fetch"):
                status, page = await asyncio.wait_for(self._fetch(target), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("liveness.timeout after_s=%s", self._timeout)
            return LivenessResult(reachable=False, note=INACCESSIBLE_NOTE, error="TimeoutError")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("liveness.unreachable err=%s", type(e).__name__)
            return LivenessResult(
                reachable=False, note=INACCESSIBLE_NOTE, error=type(e).__name__
            )

        if status != 200:
            logger.info("liveness.bad_status status=%d", status)
            return LivenessResult(reachable=False, httpStatus=status)

        found = name_on_page(page, expected_name)
        logger.info("liveness.ok name_found=%s", found)
        return LivenessResult(reachable=True, httpStatus=200, nameFound=found)
