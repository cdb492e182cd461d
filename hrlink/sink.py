"""Remote real-time database sink."""

from typing import Optional
from urllib.parse import quote

import httpx

from hrlink.config import REALTIME_DB_URL, SINK_PATH, SINK_TIMEOUT_SECONDS
from hrlink.models import SinkWrite


class SinkWriteError(Exception):
    """A write to the remote store failed."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Write of {key!r} failed: {reason}")
        self.key = key
        self.reason = reason


class Sink:
    """Interface for a keyed remote store."""

    async def write(self, write: SinkWrite) -> None:
        """Store ``write.payload`` under ``write.key``. Raises SinkWriteError on failure."""
        raise NotImplementedError

    async def close(self) -> None:
        return None


class RealtimeDatabaseSink(Sink):
    """Writes records through the REST API of a Firebase-style real-time database.

    Each record is stored with ``PUT {base_url}/{path}/{key}.json``, which
    replaces whatever was under that key. Unless a client is injected, the sink
    opens its own client on first write and closes it in ``close()``.
    """

    def __init__(
        self,
        base_url: str = REALTIME_DB_URL,
        path: str = SINK_PATH,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.path = path.strip("/")
        self._owns_client = client is None
        self.client = client
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=SINK_TIMEOUT_SECONDS, transport=self._transport
            )
        return self.client

    def url_for(self, key: str) -> str:
        # ":" is a legal key character; "/" would create a nested node
        return f"{self.base_url}/{self.path}/{quote(key, safe=':_-')}.json"

    async def write(self, write: SinkWrite) -> None:
        url = self.url_for(write.key)
        try:
            response = await self._get_client().put(url, json=write.payload.model_dump())
        except httpx.HTTPError as e:
            raise SinkWriteError(write.key, f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise SinkWriteError(
                write.key, f"HTTP {response.status_code}: {response.text[:200]}"
            )

    async def close(self) -> None:
        if self._owns_client and self.client is not None:
            await self.client.aclose()
            self.client = None
