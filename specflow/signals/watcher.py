"""Polling watcher for artifact files under the outputs tree."""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

Signature = tuple[int, int]


@dataclass
class _Pending:
    event: str
    signature: Signature
    changed_at: float


class ArtifactWatcher:
    """Reports added/changed .json and .md files once their writes settle.

    A file is reported after its (mtime, size) has stayed the same for the
    debounce window, so a half-written file is never handed to the
    dispatcher. Files present when watching starts are not reported.
    """

    PATTERNS = ("*.json", "*.md")

    def __init__(
        self,
        root: Path,
        on_change: Callable[[Path, str], Any],
        debounce_seconds: float = 0.1,
        poll_interval_seconds: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.root = Path(root)
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._known: dict[Path, Signature] = {}
        self._pending: dict[Path, _Pending] = {}
        self._primed = False
        self._running = False

    def prime(self) -> None:
        """Record the current files as the baseline."""
        self._known = self._snapshot()
        self._pending.clear()
        self._primed = True

    def poll(self, now: float | None = None) -> list[tuple[Path, str]]:
        """Scan once and dispatch every file whose write has settled."""
        if not self._primed:
            self.prime()
            return []
        now = self._clock() if now is None else now
        current = self._snapshot()

        for path, signature in current.items():
            pending = self._pending.get(path)
            if pending is not None:
                if pending.signature != signature:
                    pending.signature = signature
                    pending.changed_at = now
            elif self._known.get(path) != signature:
                event = "add" if path not in self._known else "change"
                self._pending[path] = _Pending(event, signature, now)

        for path in [p for p in self._known if p not in current]:
            del self._known[path]
        for path in [p for p in self._pending if p not in current]:
            del self._pending[path]

        settled: list[tuple[Path, str]] = []
        for path, pending in list(self._pending.items()):
            if now - pending.changed_at >= self.debounce_seconds:
                del self._pending[path]
                self._known[path] = pending.signature
                settled.append((path, pending.event))

        for path, event in settled:
            self._emit(path, event)
        return settled

    async def run(self) -> None:
        """Poll until stop() is called."""
        self._running = True
        self.prime()
        logger.info(f"Watching {self.root} for artifact changes")
        while self._running:
            self.poll()
            await asyncio.sleep(self.poll_interval_seconds)

    def stop(self) -> None:
        self._running = False

    def _emit(self, path: Path, event: str) -> None:
        logger.debug("File %s: %s", event, path)
        try:
            self.on_change(path, event)
        except Exception as e:
            logger.warning(f"Change handler failed for {path}: {e}")

    def _snapshot(self) -> dict[Path, Signature]:
        snapshot: dict[Path, Signature] = {}
        if not self.root.exists():
            return snapshot
        for pattern in self.PATTERNS:
            for path in self.root.rglob(pattern):
                try:
                    stat = path.stat()
                except OSError:
                    continue
                snapshot[path] = (stat.st_mtime_ns, stat.st_size)
        return snapshot
