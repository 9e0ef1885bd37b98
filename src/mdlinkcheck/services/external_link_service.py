# src/mdlinkcheck/services/external_link_service.py
import asyncio
import logging
from typing import Dict, Optional

from mdlinkcheck.model import ExternalCheckResult
from mdlinkcheck.services.http_request_service import HttpRequestService

logger = logging.getLogger(__name__)

# Servers that reject HEAD often answer with one of these; GET decides instead.
RETRY_WITH_GET = frozenset({400, 403, 405, 501})


class ExternalLinkService:
    """
    Best-effort liveness check for external URLs.
    Features:
    - HEAD request optimization with GET fallback.
    - One deadline for the whole HEAD(+GET) exchange.
    - Per-run deduplication: one live check per distinct URL, shared by
      concurrent callers.
    Never raises; failures are reported as ExternalCheckResult(ok=False).
    """

    def __init__(self, http_service: HttpRequestService, timeout: float = 10.0):
        self.http_service = http_service
        self.timeout = timeout
        self._checks: Dict[str, asyncio.Task] = {}

    @property
    def results(self) -> Dict[str, ExternalCheckResult]:
        """Finished checks of this run, keyed by URL."""
        return {
            url: task.result()
            for url, task in self._checks.items()
            if task.done() and not task.cancelled()
        }

    @staticmethod
    def _to_result(response: dict) -> ExternalCheckResult:
        status = response.get("status", -99)
        if response.get("error"):
            return ExternalCheckResult(ok=False, reason=response["error"])
        if 200 <= status < 300:
            return ExternalCheckResult(ok=True)
        return ExternalCheckResult(ok=False, reason=f"HTTP {status}")

    async def _request_status(self, url: str) -> ExternalCheckResult:
        response = await self.http_service.perform_request(url, method="HEAD")
        status = response.get("status", -99)

        if status in RETRY_WITH_GET:
            logger.debug("HEAD %s returned %i, retrying with GET.", url, status)
            response = await self.http_service.perform_request(url, method="GET")

        return self._to_result(response)

    async def _check_with_deadline(self, url: str) -> ExternalCheckResult:
        try:
            result = await asyncio.wait_for(self._request_status(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            result = ExternalCheckResult(ok=False, reason="timeout")
        except Exception as e:
            logger.error("External check for %s failed unexpectedly: %s", url, e, exc_info=True)
            result = ExternalCheckResult(ok=False, reason=str(e) or e.__class__.__name__)

        if not result.ok:
            logger.info("External link %s failed: %s", url, result.reason)
        return result

    async def check(self, url: str) -> ExternalCheckResult:
        task: Optional[asyncio.Task] = self._checks.get(url)
        if task is None:
            task = asyncio.ensure_future(self._check_with_deadline(url))
            self._checks[url] = task
        return await asyncio.shield(task)
