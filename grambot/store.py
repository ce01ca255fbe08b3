"""UpdateStore — the client's current update and last fetched batch."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from core.logger import GrambotLogger

logger = GrambotLogger.get_logger()


class UpdateStore:
    """Mutable holder owned by exactly one :class:`~grambot.client.GramBot`.

    Attributes:
        data: The update currently being served (``{}`` when none).
        updates: The decoded envelope of the last ``getUpdates`` call.
        offset: Next offset to poll from, advanced after acknowledging a batch.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = data or {}
        self.updates: Dict[str, Any] = {}
        self.offset: int = 0

    def load(self, body: Union[bytes, str, Dict[str, Any], None]) -> Dict[str, Any]:
        """Decode a webhook body and make it the current update."""
        if isinstance(body, dict):
            self.data = body
            return self.data
        if not body:
            self.data = {}
            return self.data
        try:
            decoded = json.loads(body)
        except ValueError as exc:
            logger.warning("Webhook body is not valid JSON", extra={"error": str(exc)})
            decoded = {}
        self.data = decoded if isinstance(decoded, dict) else {}
        return self.data

    @property
    def batch(self) -> List[Dict[str, Any]]:
        """Updates of the last fetched batch (empty when the fetch failed)."""
        result = self.updates.get("result")
        return result if isinstance(result, list) else []

    def select(self, index: int) -> Dict[str, Any]:
        """Serve update *index* of the last batch.

        Raises:
            IndexError: If *index* is outside the batch.
        """
        batch = self.batch
        if not 0 <= index < len(batch):
            raise IndexError(f"update index {index} outside batch of {len(batch)}")
        self.data = batch[index]
        return self.data

    def count(self) -> int:
        return len(self.batch)
