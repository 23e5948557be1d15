"""Process-wide pool source registry."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from .adapters.source_adapters import SourceConfig
from .errors import ValidationError
from .logger import get_logger

logger = get_logger(__name__)


class SourceRegistry:
    """Ordered list of pool sources with administrative toggles.

    Every mutation swaps in a new tuple under a lock; readers take the
    current tuple with :meth:`snapshot` and iterate it without locking, so an
    in-flight aggregation never sees a toggle made after it started.
    """

    def __init__(self, sources: Iterable[SourceConfig] = ()):
        self._lock = threading.Lock()
        self._sources: tuple[SourceConfig, ...] = tuple(sources)
        names = [s.name for s in self._sources]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate source names: {names}")

    def snapshot(self) -> tuple[SourceConfig, ...]:
        return self._sources

    def enabled(self) -> tuple[SourceConfig, ...]:
        return tuple(s for s in self._sources if s.enabled)

    def get(self, name: str) -> SourceConfig | None:
        return next((s for s in self._sources if s.name == name), None)

    def set_enabled(self, name: str, enabled: bool) -> SourceConfig:
        """Enable or disable a source by name.

        Raises:
            ValidationError: If no source has this name
        """
        with self._lock:
            for index, source in enumerate(self._sources):
                if source.name == name:
                    updated = source.with_enabled(enabled)
                    self._sources = (
                        self._sources[:index] + (updated,) + self._sources[index + 1 :]
                    )
                    break
            else:
                raise ValidationError(f"Unknown source '{name}'", code="unknown_source")
        logger.info("Source '%s' %s", name, "enabled" if enabled else "disabled")
        return updated

    def add_source(self, source: SourceConfig) -> None:
        """Append a source at the end of the declaration order.

        Raises:
            ValidationError: If a source with the same name exists
        """
        with self._lock:
            if any(s.name == source.name for s in self._sources):
                raise ValidationError(
                    f"Source '{source.name}' already registered", code="duplicate_source"
                )
            self._sources = self._sources + (source,)
        logger.info("Registered source '%s'", source.name)

    def __len__(self) -> int:
        return len(self._sources)
