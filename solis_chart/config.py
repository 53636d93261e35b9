# solis_chart/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from solis_chart.errors import ConfigError

SOLIS_BASE_DEFAULT = "https://www.soliscloud.com:13333"


@dataclass
class SolisConfig:
    api_key: str = ""
    api_secret: str = ""
    base_url: str = SOLIS_BASE_DEFAULT
    timeout: float = 20.0
    currency: str = "SEK"


@dataclass
class PageConfig:
    revalidate_seconds: int = 3600
    retry_seconds: int = 300
    timezone: str = "Europe/Stockholm"


@dataclass
class RevalidateConfig:
    cron_secret: str = ""
    revalidate_secret: str = ""
    site_url: str = ""


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class AppConfig:
    solis: SolisConfig = field(default_factory=SolisConfig)
    page: PageConfig = field(default_factory=PageConfig)
    revalidate: RevalidateConfig = field(default_factory=RevalidateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        env = os.environ if environ is None else environ

        def get(name: str, default: str = "") -> str:
            return (env.get(name) or default).strip()

        solis = SolisConfig(
            api_key=get("API_KEY"),
            api_secret=get("API_SECRET"),
            base_url=get("SOLIS_BASE_URL", SOLIS_BASE_DEFAULT).rstrip("/"),
            timeout=_number(get("SOLIS_TIMEOUT", "20"), float, "SOLIS_TIMEOUT"),
        )
        page = PageConfig(
            revalidate_seconds=_number(
                get("PAGE_REVALIDATE_SECONDS", "3600"), int, "PAGE_REVALIDATE_SECONDS"
            ),
            retry_seconds=_number(get("PAGE_RETRY_SECONDS", "300"), int, "PAGE_RETRY_SECONDS"),
            timezone=get("TIMEZONE", "Europe/Stockholm"),
        )
        revalidate = RevalidateConfig(
            cron_secret=get("CRON_SECRET"),
            revalidate_secret=get("REVALIDATE_SECRET"),
            site_url=get("NEXT_PUBLIC_SITE_URL").rstrip("/"),
        )
        server = ServerConfig(
            host=get("HOST", "0.0.0.0"),
            port=_number(get("PORT", "8000"), int, "PORT"),
        )
        return cls(
            solis=solis,
            page=page,
            revalidate=revalidate,
            logging=LoggingConfig(level=get("LOG_LEVEL", "INFO").upper()),
            server=server,
        )


def _number(raw: str, kind, name: str):
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value
