"""Contrôleur de session : restauration, connexion, inscription et déconnexion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from authsession.services.auth_client import (
    AuthServiceClient,
    AuthServiceError,
    RequestRejected,
    bearer_header,
)
from authsession.services.token_store import TokenStore
from authsession.state import AppState, SessionState, User

logger = logging.getLogger(__name__)

ROOT_DESTINATION = "/"
PROFILE_DESTINATION = "/profile"
SUCCESS_DESTINATION = "/success"

LOGIN_ERROR_MESSAGE = "Une erreur est survenue lors de la connexion."
REGISTER_ERROR_MESSAGE = "Une erreur est survenue lors de l'inscription."


@dataclass(frozen=True, slots=True)
class FlowResult:
    """Issue d'une action utilisateur.

    En cas de succès ``message`` vaut la chaîne vide et ``destination``
    indique la vue vers laquelle l'appelant doit naviguer. En cas d'échec
    ``message`` contient l'erreur à afficher et aucune navigation n'est
    demandée.
    """

    ok: bool
    message: str = ""
    destination: str | None = None

    @classmethod
    def success(cls, destination: str) -> FlowResult:
        return cls(ok=True, destination=destination)

    @classmethod
    def failure(cls, message: str) -> FlowResult:
        return cls(ok=False, message=message)


class SessionController:
    """Service responsable de l'état d'authentification de l'application.

    Une seule instance par application, transmise explicitement aux
    composants qui en ont besoin.
    """

    def __init__(
        self,
        client: AuthServiceClient,
        store: TokenStore,
        state: AppState | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._state = state or AppState()
        self._restore_done = False

        if self._store.read() is not None:
            self._state.begin_restore()
        else:
            self._state.reset()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def status(self) -> SessionState:
        return self._state.status

    @property
    def user(self) -> User | None:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def restore_session(self) -> SessionState:
        """Rétablit la session depuis le jeton enregistré, une seule fois.

        Un jeton refusé, une réponse illisible ou une erreur réseau effacent
        le jeton sans remonter d'erreur.
        """
        if self._restore_done:
            return self._state.status
        self._restore_done = True

        token = self._store.read()
        if token is None:
            self._state.reset()
            return self._state.status

        self._state.begin_restore()
        try:
            user = self._fetch_identity(token)
        except RequestRejected as exc:
            logger.info("Jeton enregistré refusé (statut %s), session effacée.", exc.status_code)
            self._invalidate()
        except (AuthServiceError, ValueError):
            logger.exception("Impossible de restaurer la session.")
            self._invalidate()
        else:
            self._state.sign_in(user)
            logger.info("Session restaurée pour %s.", user.username)
        return self._state.status

    def login(self, username: str, password: str) -> FlowResult:
        """Connecte l'utilisateur ; en cas de succès, redirige vers le profil."""
        try:
            response = self._client.login(username, password)
            response.raise_for_status()
            token = _extract_token(response.payload())
            # Le jeton est enregistré avant la vérification d'identité : s'il
            # est refusé ensuite, la prochaine restauration l'effacera.
            self._store.write(token)
            user = self._fetch_identity(token)
        except RequestRejected as exc:
            logger.info("Connexion refusée pour %s (statut %s).", username, exc.status_code)
            return FlowResult.failure(exc.message)
        except (AuthServiceError, ValueError, OSError):
            logger.exception("Erreur lors de la connexion.")
            return FlowResult.failure(LOGIN_ERROR_MESSAGE)

        self._state.sign_in(user)
        logger.info("Utilisateur %s connecté.", user.username)
        return FlowResult.success(PROFILE_DESTINATION)

    def register(self, user_data: Mapping[str, Any]) -> FlowResult:
        """Crée un compte ; ne connecte pas l'utilisateur."""
        try:
            self._client.register(user_data).raise_for_status()
        except RequestRejected as exc:
            logger.info("Inscription refusée (statut %s).", exc.status_code)
            return FlowResult.failure(exc.message)
        except AuthServiceError:
            logger.exception("Erreur lors de l'inscription.")
            return FlowResult.failure(REGISTER_ERROR_MESSAGE)
        return FlowResult.success(SUCCESS_DESTINATION)

    def logout(self) -> FlowResult:
        """Déconnecte l'utilisateur et supprime le jeton enregistré."""
        self._invalidate()
        return FlowResult.success(ROOT_DESTINATION)

    def authorization_headers(self) -> dict[str, str]:
        """En-têtes à joindre aux requêtes protégées tant que la session est active.

        Point d'extension pour les autres clients HTTP de l'application ;
        retourne un dictionnaire vide hors session authentifiée.
        """
        if not self._state.is_authenticated:
            return {}
        token = self._store.read()
        return bearer_header(token) if token else {}

    def _fetch_identity(self, token: str) -> User:
        response = self._client.fetch_current_user(token)
        response.raise_for_status()
        return User.from_payload(response.payload().get("user"))

    def _invalidate(self) -> None:
        self._state.reset()
        try:
            self._store.clear()
        except OSError:
            logger.exception("Impossible de supprimer le jeton enregistré.")


def _extract_token(payload: dict[str, Any]) -> str:
    token = payload.get("token")
    if not isinstance(token, str) or not token:
        raise ValueError("Réponse de connexion sans jeton.")
    return token
