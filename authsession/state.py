"""Structures de données partagées entre la couche UI et les services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """États possibles de la session utilisateur."""

    UNAUTHENTICATED = "unauthenticated"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True, slots=True)
class User:
    """Identité renvoyée par le service d'authentification."""

    id: Any
    username: str
    profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> User:
        """Construit un utilisateur depuis la clé ``user`` d'une réponse.

        Lève ``ValueError`` si l'objet n'est pas un dictionnaire ou s'il lui
        manque l'identifiant ou le nom d'utilisateur.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Données utilisateur absentes ou invalides.")
        if payload.get("id") is None or not payload.get("username"):
            raise ValueError("Données utilisateur incomplètes (id ou username manquant).")
        return cls(id=payload["id"], username=str(payload["username"]), profile=dict(payload))

    def get(self, key: str, default: Any = None) -> Any:
        return self.profile.get(key, default)


Listener = Callable[["AppState"], None]


@dataclass(slots=True)
class AppState:
    """État interne de la session.

    ``user`` n'est renseigné que si ``status`` vaut ``AUTHENTICATED`` : les
    seules méthodes qui modifient l'état maintiennent cette règle.
    """

    status: SessionState = SessionState.UNAUTHENTICATED
    user: User | None = None
    _listeners: list[Listener] = field(default_factory=list, repr=False, compare=False)

    @property
    def is_authenticated(self) -> bool:
        """Retourne True si l'utilisateur est authentifié."""
        return self.status is SessionState.AUTHENTICATED

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Enregistre un observateur et retourne la fonction de désinscription."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_restore(self) -> None:
        """Passe en cours de restauration (aucun utilisateur chargé)."""
        self._update(SessionState.RESTORING, None)

    def sign_in(self, user: User) -> None:
        """Marque la session comme authentifiée pour ``user``."""
        self._update(SessionState.AUTHENTICATED, user)

    def reset(self) -> None:
        """Réinitialise l'état de la session."""
        self._update(SessionState.UNAUTHENTICATED, None)

    def _update(self, status: SessionState, user: User | None) -> None:
        if self.status is status and self.user == user:
            return
        self.status = status
        self.user = user
        logger.debug("Session : %s", status.value)
        for listener in list(self._listeners):
            listener(self)
