"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    AMNIS_STAKE_INFO_URL,
    APTOS_FULLNODE_URL,
    APTOS_INDEXER_URL,
    ECHELON_MARKETS_URL,
    HYPERION_API_URL,
    HYPERION_POOLS_URL,
    PANORA_API_URL,
    TAPP_API_URL,
    YIELD_MARKETS_URL,
)
from .units import DEFAULT_DECIMALS, MAX_DECIMALS

load_dotenv()

CONFIG_ENV_VAR = "PORTFOLIO_ENGINE_CONFIG"
SECRET_FIELDS = {"aptos_api_key", "panora_api_key"}


class ExtraToken(BaseModel):
    """Token table entry supplied from the config file."""

    symbol: str
    name: str | None = None
    decimals: int = Field(default=DEFAULT_DECIMALS, ge=0, le=MAX_DECIMALS)

    model_config = ConfigDict(extra="ignore")


class EngineSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with PORTFOLIO_ENGINE_)
    - Config file (TOML), lowest precedence

    Built once at start-up and handed to every adapter and client.
    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- upstream endpoints ---
    aptos_fullnode_url: str = APTOS_FULLNODE_URL
    aptos_indexer_url: str = APTOS_INDEXER_URL
    panora_api_url: str = PANORA_API_URL
    hyperion_api_url: str = HYPERION_API_URL
    yield_markets_url: str = YIELD_MARKETS_URL
    hyperion_pools_url: str = HYPERION_POOLS_URL
    tapp_api_url: str = TAPP_API_URL
    amnis_stake_info_url: str = AMNIS_STAKE_INFO_URL
    echelon_markets_url: str = ECHELON_MARKETS_URL

    # --- secrets ---
    aptos_api_key: SecretStr | None = None
    panora_api_key: SecretStr | None = None

    # --- timeouts and retries ---
    source_timeout_seconds: float = Field(default=8.0, gt=0, le=60)
    quote_timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    balance_timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    max_tries: int = Field(default=3, ge=1, le=10)

    # --- sources ---
    disabled_sources: list[str] = Field(default_factory=list)
    tapp_page_size: int = Field(default=50, ge=1, le=500)

    # --- reference data (config file only) ---
    extra_tokens: dict[str, ExtraToken] = Field(default_factory=dict)

    # --- server ---
    host: str = "127.0.0.1"
    port: int = 8000

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_ENGINE_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("aptos_api_key", "panora_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or v == "" or isinstance(v, SecretStr):
            return v or None
        return SecretStr(v)

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("portfolio-engine.toml")
                    user_config = (
                        Path.home() / ".config" / "portfolio-engine" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [portfolio_engine]
                body = data.get("portfolio_engine", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def aptos_view_url(self) -> str:
        return f"{self.aptos_fullnode_url.rstrip('/')}/view"

    @property
    def aptos_auth_headers(self) -> dict[str, str]:
        """Bearer header for Aptos Labs endpoints; empty when no key is set."""
        if self.aptos_api_key is None:
            return {}
        return {"Authorization": f"Bearer {self.aptos_api_key.get_secret_value()}"}

    @property
    def panora_auth_headers(self) -> dict[str, str]:
        if self.panora_api_key is None:
            return {}
        return {"x-api-key": self.panora_api_key.get_secret_value()}
