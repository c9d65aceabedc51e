"""Debug notices collected during a single shipping calculation."""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Optional

from ..config import settings

logger = logging.getLogger(__name__)


class DiagnosticsSink:
    """Collects human readable debug lines for one calculation run.

    Nothing is recorded unless ``enabled``. Each distinct message is kept once
    (keyed by the MD5 of its text) and forwarded to ``callback`` when given.
    """

    def __init__(
        self,
        enabled: bool | None = None,
        prefix: str | None = None,
        callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.enabled = settings.debug_mode if enabled is None else enabled
        self.prefix = (prefix or settings.method_id).upper()
        self.callback = callback
        self._messages: dict[str, str] = {}

    def add(self, message: str, kind: str = "") -> None:
        if not message or not self.enabled:
            return
        key = hashlib.md5(message.encode("utf-8")).hexdigest()
        if key in self._messages:
            return
        label = f"{self.prefix}_{kind.upper()}" if kind else self.prefix
        line = f"{label} => {message}"
        self._messages[key] = line
        logger.debug(line)
        if self.callback is not None:
            self.callback(line)

    def error(self, message: str) -> None:
        self.add(message, "error")

    @property
    def messages(self) -> list[str]:
        return list(self._messages.values())

    def __len__(self) -> int:
        return len(self._messages)
