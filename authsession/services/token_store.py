"""Stockage persistant du jeton de session."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class TokenStore:
    """Emplacement durable d'un jeton opaque, sous une clé fixe d'un fichier JSON.

    Le contenu du jeton n'est jamais interprété. Les autres clés éventuellement
    présentes dans le fichier sont conservées.
    """

    def __init__(self, path: str | os.PathLike[str] = ".auth_session", *, key: str = TOKEN_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str | None:
        """Retourne le jeton enregistré, ou None s'il n'y en a pas."""
        value = self._load().get(self._key)
        if isinstance(value, str) and value:
            return value
        return None

    def write(self, token: str) -> None:
        """Enregistre le jeton en remplaçant la valeur précédente."""
        data = self._load()
        data[self._key] = token
        self._dump(data)

    def clear(self) -> None:
        """Supprime le jeton enregistré. Sans effet s'il est absent."""
        data = self._load()
        if self._key not in data:
            return
        del data[self._key]
        if data:
            self._dump(data)
            return
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass

    def _load(self) -> dict[str, Any]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Fichier de session illisible, ignoré : %s", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Fichier de session mal formé, ignoré : %s", self._path)
            return {}
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".session-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except BaseException:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            raise
