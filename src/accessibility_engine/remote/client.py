"""
HTTP client for the authenticated remote preference record.

Each identity owns one record at ``{base_url}/preferences/{identity}``:

    {"onboarding_completed": true, "config": {"fontSize": 120, ...}}

A 404 on read means the identity has no record yet.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..core.exceptions import RemoteLoadError, RemoteWriteError
from ..core.ports import RemotePreferences
from ..utils.logger import get_logger

logger = get_logger(__name__)


class RemotePreferenceClient:
    """Fetches and stores preference records over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``http://localhost:8000/api``
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (tests pass a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._client.headers.update(headers)

    def _url(self, identity: str) -> str:
        # Identities are opaque; encode every reserved character
        return f"{self.base_url}/preferences/{quote(identity, safe='')}"

    def fetch(self, identity: str) -> Optional[RemotePreferences]:
        """
        Fetch the record for ``identity``.

        Returns:
            RemotePreferences, or None if the identity has no record

        Raises:
            RemoteLoadError: On transport errors, error statuses or bad payloads
        """
        try:
            response = self._client.get(self._url(identity))
            if response.status_code == 404:
                logger.info(f"No remote preferences for {identity}")
                return None
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteLoadError(
                f"HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteLoadError(str(e)) from e

        return self._parse(data)

    def save(self, identity: str, preferences: RemotePreferences) -> None:
        """
        Write the record for ``identity``.

        Raises:
            RemoteWriteError: On transport errors or error statuses
        """
        payload = {
            "onboarding_completed": bool(preferences.onboarding_completed),
            "config": dict(preferences.config),
        }
        try:
            response = self._client.put(self._url(identity), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteWriteError(
                f"HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteWriteError(str(e)) from e

        logger.debug(f"Saved remote preferences for {identity}")

    @staticmethod
    def _parse(data: Any) -> RemotePreferences:
        if not isinstance(data, dict):
            raise RemoteLoadError("Malformed preference record")

        flag = data.get("onboarding_completed")
        if not isinstance(flag, bool):
            flag = None

        config: Dict[str, Any] = data.get("config") or {}
        if not isinstance(config, dict):
            logger.warning("Ignoring malformed remote config payload")
            config = {}

        return RemotePreferences(onboarding_completed=flag, config=config)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
