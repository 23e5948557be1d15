from __future__ import annotations

from .quote_adapters import QUOTE_ADAPTERS
from .source_adapters import default_sources

__all__ = ["QUOTE_ADAPTERS", "default_sources"]
