"""AnkiConnect client.

AnkiConnect (add-on 2055492159) exposes Anki over a local JSON-over-HTTP API:
every call is a POST of ``{"action", "version", "params"}`` answered with
``{"result", "error"}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import httpx

from app.core.logging import get_logger
from app.modules.anki_export.anki_format import AnkiNote

logger = get_logger(__name__)

ANKI_CONNECT_VERSION = 6


class AnkiConnectError(Exception):
    """Raised when an AnkiConnect call fails or returns an error."""

    pass


class AnkiConnectTimeoutError(AnkiConnectError):
    """The call did not complete within the configured timeout."""

    def __init__(self, action: str, timeout_ms: int) -> None:
        self.action = action
        self.timeout_ms = timeout_ms
        super().__init__(
            f"AnkiConnect timeout after {timeout_ms}ms on '{action}' - "
            "check that Anki is open and AnkiConnect is installed"
        )


@dataclass
class ImportSummary:
    attempted: int = 0
    added: int = 0
    duplicates: int = 0


class AnkiConnectClient:
    """Thin async wrapper over the AnkiConnect actions used by deck setup."""

    def __init__(
        self,
        url: str = "http://localhost:8765",
        *,
        timeout_ms: int = 10000,
        batch_size: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.url = url
        self.timeout_ms = timeout_ms
        self.batch_size = batch_size
        self._transport = transport

    @classmethod
    def from_settings(cls, anki_settings, **kwargs) -> "AnkiConnectClient":
        return cls(
            anki_settings.url,
            timeout_ms=anki_settings.timeout_ms,
            batch_size=anki_settings.batch_size,
            **kwargs,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_ms / 1000, transport=self._transport
        )

    async def invoke(self, action: str, params: Optional[dict[str, Any]] = None) -> Any:
        payload = {"action": action, "version": ANKI_CONNECT_VERSION, "params": params or {}}
        try:
            async with self._client() as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise AnkiConnectTimeoutError(action, self.timeout_ms) from exc
        except httpx.HTTPError as exc:
            raise AnkiConnectError(f"HTTP error calling AnkiConnect '{action}': {exc}") from exc
        except ValueError as exc:
            raise AnkiConnectError(f"Invalid JSON from AnkiConnect '{action}': {exc}") from exc

        if not isinstance(data, dict) or "result" not in data or "error" not in data:
            raise AnkiConnectError(f"Unexpected AnkiConnect response for '{action}': {data!r}")
        if data["error"]:
            raise AnkiConnectError(f"AnkiConnect error: {data['error']}")
        return data["result"]

    async def version(self) -> int:
        return await self.invoke("version")

    async def model_names(self) -> list[str]:
        return await self.invoke("modelNames")

    async def create_deck(self, deck: str) -> Any:
        return await self.invoke("createDeck", {"deck": deck})

    async def add_notes(
        self,
        notes: Sequence[AnkiNote],
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> ImportSummary:
        """Add notes in batches; a ``null`` outcome marks a duplicate."""
        summary = ImportSummary(attempted=len(notes))
        total = len(notes)

        for start in range(0, total, self.batch_size):
            batch = notes[start : start + self.batch_size]
            results = await self.invoke(
                "addNotes", {"notes": [n.model_dump() for n in batch]}
            )
            if not isinstance(results, list) or len(results) != len(batch):
                raise AnkiConnectError(
                    f"addNotes returned {len(results) if isinstance(results, list) else results!r} "
                    f"outcomes for a batch of {len(batch)}"
                )
            for outcome in results:
                if outcome is None:
                    summary.duplicates += 1
                else:
                    summary.added += 1

            done = min(start + self.batch_size, total)
            logger.debug("addNotes progress: %d/%d", done, total)
            if on_progress is not None:
                on_progress(done, total)

        return summary
