"""
Block explorer API client for chain statistics.
"""

from typing import Optional
import requests
import structlog

from ..models import NetworkStats

logger = structlog.get_logger(__name__)


class ExplorerClient:
    """
    Minimal client for the Graphite block explorer API.

    Network stats are informational, so failures are logged and reported as
    None instead of raised.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """
        Initialize explorer client.

        Args:
            base_url: Explorer API base URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_network_stats(self) -> Optional[NetworkStats]:
        """
        Fetch the latest block number.

        Returns:
            NetworkStats, or None if the explorer is not configured or the call failed
        """
        if not self.base_url:
            logger.debug("explorer_not_configured")
            return None

        try:
            response = self.session.get(
                self.base_url,
                params={"module": "block", "action": "getlatestblockno"},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "explorer_request_failed",
                base_url=self.base_url,
                error=str(e)
            )
            return None

        if not isinstance(data, dict):
            logger.warning("explorer_response_invalid", body_type=type(data).__name__)
            return None

        if data.get("status") != "1":
            logger.info(
                "explorer_returned_error",
                message=data.get("message")
            )
            return None

        try:
            return NetworkStats(latest_block=int(data["result"], 16))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("explorer_result_invalid", result=data.get("result"), error=str(e))
            return None


__all__ = ["ExplorerClient"]
