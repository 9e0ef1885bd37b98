# src/mdlinkcheck/services/http_request_service.py
import asyncio
import logging
from typing import Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "mdlinkcheck/1.0"


class HttpRequestService:
    """
    Central service for executing HTTP requests (HEAD/GET).
    Manages the aiohttp session, redirects, and error handling.
    Response bodies are never downloaded.
    """

    def __init__(self, config: Dict, user_agent: Optional[str] = None):
        self.config = config
        self.user_agent = user_agent or DEFAULT_USER_AGENT

        session_config = config.get('session', {})
        self.timeout = float(session_config.get('time_out', 10.0))
        self.max_redirects = int(session_config.get('max_redirects', 10))

        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
            default_headers = {
                'Accept-Encoding': 'gzip, deflate',
                'User-Agent': self.user_agent
            }
            self.session = aiohttp.ClientSession(
                timeout=timeout_obj, headers=default_headers
            )
            logger.debug("HttpRequestService: Session initialized.")

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug("HttpRequestService: Session closed.")

    async def perform_request(self, url: str, method: str = "HEAD") -> dict:
        """
        Sends a HEAD or GET request, following redirects.

        Returns a dict with the final 'status', or a negative 'status'
        plus an 'error' message on transport failure ('timeout' on timeouts).
        """
        if not self.session or self.session.closed:
            await self.initialize()

        method = method.upper()
        if method not in ("HEAD", "GET"):
            return {"status": -99, "error": f"Method {method} not supported"}

        try:
            async with self.session.request(
                    method,
                    url,
                    allow_redirects=True,
                    max_redirects=self.max_redirects,
            ) as response:
                if response.history:
                    logger.debug(
                        "%s redirected via %s",
                        url, " -> ".join(f"{r.status} {r.url}" for r in response.history),
                    )
                response_data = {"status": response.status}
        except asyncio.TimeoutError:
            response_data = {"status": -1, "error": "timeout"}
        except aiohttp.ClientError as e:
            response_data = {"status": -1, "error": str(e) or e.__class__.__name__}
        except Exception as e:
            logger.debug("Unexpected error requesting %s: %s", url, e, exc_info=True)
            response_data = {"status": -2, "error": str(e) or e.__class__.__name__}

        logger.debug("%s %s -> %s", method, url, response_data.get("status"))
        return response_data
