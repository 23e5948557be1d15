"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .adapters.source_adapters import default_sources
from .registry import SourceRegistry
from .settings import EngineSettings
from .swap_router import SwapRouter
from .tokens import TokenTable


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Built once at start-up and passed to every entry point to avoid global
    state and enable testing.
    """

    settings: EngineSettings
    logger: logging.Logger
    registry: SourceRegistry = field(init=False)
    tokens: TokenTable = field(init=False)
    router: SwapRouter = field(init=False)

    def __post_init__(self) -> None:
        self.registry = SourceRegistry(default_sources(self.settings))
        self.tokens = TokenTable.from_settings(self.settings)
        self.router = SwapRouter(self.settings, token_table=self.tokens)
