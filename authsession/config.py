"""Gestion centralisée de la configuration du client d'authentification."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_BACKEND_URL = "http://localhost:3000"
DEFAULT_STORAGE_PATH = ".auth_session"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "INFO"
_DISABLED_TIMEOUT_VALUES = ("", "0", "none", "off")


class ConfigError(RuntimeError):
    """Erreur levée lorsque la configuration est invalide."""


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Paramètres nécessaires pour dialoguer avec le service d'authentification."""

    backend_url: str = DEFAULT_BACKEND_URL
    storage_path: str = DEFAULT_STORAGE_PATH
    request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def endpoint(self, path: str) -> str:
        """Construit l'URL complète d'une route du service."""
        return f"{self.backend_url.rstrip('/')}/{path.lstrip('/')}"


def _parse_timeout(raw: str) -> float | None:
    value = raw.strip().lower()
    if value in _DISABLED_TIMEOUT_VALUES:
        return None
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"AUTH_REQUEST_TIMEOUT invalide : {raw!r}") from exc
    if timeout < 0:
        raise ConfigError(f"AUTH_REQUEST_TIMEOUT doit être positif : {raw!r}")
    return timeout or None


def _validate_backend_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"BACKEND_URL doit être une URL http(s) complète : {url!r}")
    return url


def load_config() -> AppConfig:
    """Charge la configuration depuis l'environnement (et un éventuel fichier .env)."""
    load_dotenv()

    backend_url = (os.getenv("BACKEND_URL", "") or "").strip() or DEFAULT_BACKEND_URL
    storage_path = (os.getenv("AUTH_STORAGE_PATH", "") or "").strip() or DEFAULT_STORAGE_PATH
    timeout = _parse_timeout(os.getenv("AUTH_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)))
    log_level = (os.getenv("LOG_LEVEL", "") or "").strip().upper() or DEFAULT_LOG_LEVEL

    return AppConfig(
        backend_url=_validate_backend_url(backend_url),
        storage_path=storage_path,
        request_timeout=timeout,
        log_level=log_level,
    )
