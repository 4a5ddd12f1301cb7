"""Encapsulation des appels au service d'authentification distant."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from authsession.config import AppConfig

logger = logging.getLogger(__name__)

REJECTED_FALLBACK_MESSAGE = "La requête a été refusée par le serveur."


class AuthServiceError(RuntimeError):
    """Erreur générique : serveur injoignable ou réponse illisible."""


class RequestRejected(AuthServiceError):
    """Le serveur a répondu avec un statut hors 2xx."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ServiceResponse:
    """Réponse HTTP du service, avec l'interprétation attendue du contrat."""

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def payload(self) -> dict[str, Any]:
        """Retourne le corps JSON ; lève AuthServiceError s'il n'est pas un objet."""
        try:
            data = self._response.json()
        except ValueError as exc:
            raise AuthServiceError(
                f"Réponse illisible du service (statut {self.status_code})."
            ) from exc
        if not isinstance(data, dict):
            raise AuthServiceError(f"Réponse inattendue du service (statut {self.status_code}).")
        return data

    def raise_for_status(self) -> None:
        """Lève RequestRejected avec le message du serveur si le statut n'est pas 2xx."""
        if self.ok:
            return
        message = self.payload().get("message")
        if not isinstance(message, str) or not message.strip():
            message = REJECTED_FALLBACK_MESSAGE
        raise RequestRejected(self.status_code, message)


class AuthServiceClient:
    """Client des routes /login, /register et /user/me."""

    def __init__(self, config: AppConfig, *, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()

    def login(self, username: str, password: str) -> ServiceResponse:
        return self._request("POST", "/login", json={"username": username, "password": password})

    def register(self, user_data: Mapping[str, Any]) -> ServiceResponse:
        return self._request("POST", "/register", json=dict(user_data))

    def fetch_current_user(self, token: str) -> ServiceResponse:
        return self._request("GET", "/user/me", headers=bearer_header(token))

    def close(self) -> None:
        self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ServiceResponse:
        url = self._config.endpoint(path)
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                headers=headers,
                timeout=self._config.request_timeout,
            )
        except requests.RequestException as exc:
            raise AuthServiceError(f"Service d'authentification injoignable ({method} {path}).") from exc
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return ServiceResponse(response)


def bearer_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
