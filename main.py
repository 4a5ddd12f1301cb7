"""Point d'entrée de l'application."""

from __future__ import annotations

import logging

from authsession.config import load_config
from authsession.services import AuthServiceClient, SessionController, TokenStore
from authsession.ui import MainWindow


def main() -> None:
    """Initialise les dépendances puis lance l'interface Tkinter."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = AuthServiceClient(config)
    store = TokenStore(config.storage_path)
    logging.getLogger(__name__).info("Jeton de session stocké dans %s", store.path)
    controller = SessionController(client, store)
    app = MainWindow(controller)
    try:
        app.run()
    finally:
        client.close()


if __name__ == "__main__":
    main()
