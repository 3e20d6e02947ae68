from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import os
import sys

from rdl.domain.errors import ConfigError


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    exports_dir: Path


@dataclass(frozen=True)
class ApiSettings:
    api_url: str
    api_version: str = "v1"
    token: str | None = None
    timeout_seconds: float = 20.0
    timezone: str = "Asia/Ho_Chi_Minh"
    currency_places: int = 0

    @property
    def base_url(self) -> str:
        base = self.api_url.rstrip("/")
        if self.api_version:
            return f"{base}/{self.api_version.strip('/')}"
        return base

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "ReceiptDebtLedger") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    exports = base / "exports"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    exports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, logs_dir=logs, exports_dir=exports)


def _number(environ: Mapping[str, str], name: str, default, cast):
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be a number. Received: {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must be >= 0. Received: {raw!r}")
    return value


def get_api_settings(environ: Mapping[str, str] | None = None) -> ApiSettings:
    env = os.environ if environ is None else environ

    api_url = (env.get("RDL_API_URL") or "").strip()
    if not api_url:
        raise ConfigError("RDL_API_URL is required.")

    timezone = (env.get("RDL_TIMEZONE") or "Asia/Ho_Chi_Minh").strip()
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown time zone: {timezone}") from e

    return ApiSettings(
        api_url=api_url,
        api_version=(env.get("RDL_API_VERSION") or "v1").strip(),
        token=(env.get("RDL_API_TOKEN") or "").strip() or None,
        timeout_seconds=_number(env, "RDL_TIMEOUT", 20.0, float),
        timezone=timezone,
        currency_places=_number(env, "RDL_CURRENCY_PLACES", 0, int),
    )
