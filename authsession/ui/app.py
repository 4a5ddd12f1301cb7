"""Interface Tkinter principale."""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk

import sv_ttk

from authsession.services import (
    PROFILE_DESTINATION,
    ROOT_DESTINATION,
    SUCCESS_DESTINATION,
    FlowResult,
    SessionController,
)
from authsession.state import AppState, SessionState

REGISTER_DESTINATION = "/register"

BACKGROUND_COLOR = "#121212"
CARD_COLOR = "#181818"
STATUS_NEUTRAL_COLOR = "#B3B3B3"
STATUS_ERROR_COLOR = "#F87171"
STATUS_SUCCESS_COLOR = "#1DB954"
WINDOW_SIZE = "640x520"
REGISTER_FIELDS = (
    ("username", "Nom d'utilisateur", False),
    ("email", "Adresse e-mail", False),
    ("password", "Mot de passe", True),
)


class MainWindow:
    """Fenêtre principale de l'application."""

    def __init__(self, controller: SessionController) -> None:
        self._controller = controller

        self.root = tk.Tk()
        self.root.title("Espace membre")
        self.root.geometry(WINDOW_SIZE)
        self.root.minsize(520, 420)

        sv_ttk.set_theme("dark")
        self.root.configure(bg=BACKGROUND_COLOR)
        self._configure_styles()

        self._username_var = tk.StringVar()
        self._password_var = tk.StringVar()
        self._login_error_var = tk.StringVar()
        self._register_vars = {name: tk.StringVar() for name, _, _ in REGISTER_FIELDS}
        self._register_error_var = tk.StringVar()
        self._profile_var = tk.StringVar()

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(1, weight=1)

        self._build_header()
        self._views: dict[str, ttk.Frame] = {}
        self._build_views()

        self._unsubscribe = controller.state.subscribe(self._on_state_changed)
        self._on_state_changed(controller.state)

    # --------------------------------------------------------------------- UI -
    def _configure_styles(self) -> None:
        style = ttk.Style()
        style.configure("Main.TFrame", background=BACKGROUND_COLOR)
        style.configure("Header.TFrame", background=BACKGROUND_COLOR)
        style.configure("Card.TFrame", background=CARD_COLOR)
        style.configure(
            "HeaderTitle.TLabel",
            background=BACKGROUND_COLOR,
            foreground="#FFFFFF",
            font=("Helvetica", 20, "bold"),
        )
        style.configure(
            "Section.TLabel",
            background=CARD_COLOR,
            foreground="#FFFFFF",
            font=("Helvetica", 12, "bold"),
        )
        style.configure(
            "Status.TLabel",
            background=BACKGROUND_COLOR,
            foreground=STATUS_NEUTRAL_COLOR,
            font=("Helvetica", 11),
        )
        style.configure(
            "Field.TLabel",
            background=CARD_COLOR,
            foreground=STATUS_NEUTRAL_COLOR,
        )
        style.configure(
            "Error.TLabel",
            background=CARD_COLOR,
            foreground=STATUS_ERROR_COLOR,
        )
        style.configure("Accent.TButton", font=("Helvetica", 11, "bold"))
        style.configure("TButton", padding=(16, 8))
        self.root.option_add("*Font", "Helvetica 11")

    def _build_header(self) -> None:
        frame = ttk.Frame(self.root, style="Header.TFrame", padding=(24, 12))
        frame.grid(row=0, column=0, sticky="nwe")
        frame.columnconfigure(0, weight=1)

        ttk.Label(frame, text="Espace membre", style="HeaderTitle.TLabel").grid(
            row=0, column=0, sticky="w"
        )
        self._status_label = ttk.Label(frame, text="Non connecté", style="Status.TLabel")
        self._status_label.grid(row=0, column=1, sticky="e")

    def _build_views(self) -> None:
        container = ttk.Frame(self.root, style="Main.TFrame", padding=(24, 16))
        container.grid(row=1, column=0, sticky="nsew")
        container.columnconfigure(0, weight=1)
        container.rowconfigure(0, weight=1)

        self._views[ROOT_DESTINATION] = self._build_login_view(container)
        self._views[REGISTER_DESTINATION] = self._build_register_view(container)
        self._views[PROFILE_DESTINATION] = self._build_profile_view(container)
        self._views[SUCCESS_DESTINATION] = self._build_success_view(container)
        self._restoring_view = self._build_restoring_view(container)

        for frame in (*self._views.values(), self._restoring_view):
            frame.grid(row=0, column=0, sticky="nsew")

    def _card(self, parent: tk.Misc, title: str) -> ttk.Frame:
        frame = ttk.Frame(parent, style="Card.TFrame", padding=(20, 18))
        frame.columnconfigure(1, weight=1)
        ttk.Label(frame, text=title, style="Section.TLabel").grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 14)
        )
        return frame

    def _add_field(
        self, frame: ttk.Frame, row: int, label: str, var: tk.StringVar, secret: bool = False
    ) -> ttk.Entry:
        ttk.Label(frame, text=label, style="Field.TLabel").grid(row=row, column=0, sticky="w", pady=4)
        entry = ttk.Entry(frame, textvariable=var, show="•" if secret else "")
        entry.grid(row=row, column=1, sticky="ew", padx=(12, 0), pady=4)
        return entry

    def _build_login_view(self, parent: tk.Misc) -> ttk.Frame:
        frame = self._card(parent, "Connexion")
        self._add_field(frame, 1, "Nom d'utilisateur", self._username_var)
        password_entry = self._add_field(frame, 2, "Mot de passe", self._password_var, secret=True)
        password_entry.bind("<Return>", lambda _: self.submit_login())

        ttk.Label(frame, textvariable=self._login_error_var, style="Error.TLabel").grid(
            row=3, column=0, columnspan=2, sticky="w", pady=(8, 0)
        )
        ttk.Button(frame, text="Se connecter", command=self.submit_login, style="Accent.TButton").grid(
            row=4, column=1, sticky="e", pady=(14, 0)
        )
        ttk.Button(
            frame, text="Créer un compte", command=lambda: self.navigate(REGISTER_DESTINATION)
        ).grid(row=4, column=0, sticky="w", pady=(14, 0))
        return frame

    def _build_register_view(self, parent: tk.Misc) -> ttk.Frame:
        frame = self._card(parent, "Inscription")
        for row, (name, label, secret) in enumerate(REGISTER_FIELDS, start=1):
            self._add_field(frame, row, label, self._register_vars[name], secret=secret)

        next_row = len(REGISTER_FIELDS) + 1
        ttk.Label(frame, textvariable=self._register_error_var, style="Error.TLabel").grid(
            row=next_row, column=0, columnspan=2, sticky="w", pady=(8, 0)
        )
        ttk.Button(frame, text="S'inscrire", command=self.submit_register, style="Accent.TButton").grid(
            row=next_row + 1, column=1, sticky="e", pady=(14, 0)
        )
        ttk.Button(frame, text="Retour", command=lambda: self.navigate(ROOT_DESTINATION)).grid(
            row=next_row + 1, column=0, sticky="w", pady=(14, 0)
        )
        return frame

    def _build_profile_view(self, parent: tk.Misc) -> ttk.Frame:
        frame = self._card(parent, "Profil")
        ttk.Label(frame, textvariable=self._profile_var, style="Field.TLabel", justify=tk.LEFT).grid(
            row=1, column=0, columnspan=2, sticky="w"
        )
        ttk.Button(frame, text="Déconnexion", command=self.submit_logout, style="Accent.TButton").grid(
            row=2, column=1, sticky="e", pady=(14, 0)
        )
        return frame

    def _build_success_view(self, parent: tk.Misc) -> ttk.Frame:
        frame = self._card(parent, "Inscription réussie")
        ttk.Label(
            frame,
            text="Votre compte a été créé. Vous pouvez maintenant vous connecter.",
            style="Field.TLabel",
        ).grid(row=1, column=0, columnspan=2, sticky="w")
        ttk.Button(
            frame, text="Se connecter", command=lambda: self.navigate(ROOT_DESTINATION), style="Accent.TButton"
        ).grid(row=2, column=1, sticky="e", pady=(14, 0))
        return frame

    def _build_restoring_view(self, parent: tk.Misc) -> ttk.Frame:
        frame = self._card(parent, "Restauration de la session…")
        return frame

    # --------------------------------------------------------------- Callbacks -
    def submit_login(self) -> None:
        result = self._controller.login(self._username_var.get().strip(), self._password_var.get())
        self._password_var.set("")
        self._login_error_var.set(result.message)
        self._follow(result)

    def submit_register(self) -> None:
        user_data = {name: var.get() for name, var in self._register_vars.items()}
        result = self._controller.register(user_data)
        self._register_error_var.set(result.message)
        if result.ok:
            for var in self._register_vars.values():
                var.set("")
        self._follow(result)

    def submit_logout(self) -> None:
        self._follow(self._controller.logout())

    def _follow(self, result: FlowResult) -> None:
        if result.destination:
            self.navigate(result.destination)

    def navigate(self, destination: str) -> None:
        """Affiche la vue associée à une destination."""
        if destination == PROFILE_DESTINATION and not self._controller.is_authenticated:
            destination = ROOT_DESTINATION
        self._views.get(destination, self._views[ROOT_DESTINATION]).tkraise()

    def _on_state_changed(self, state: AppState) -> None:
        """Met à jour l'interface en fonction de l'état d'authentification."""
        if state.status is SessionState.AUTHENTICATED and state.user is not None:
            self._status_label.configure(
                text=f"Connecté en tant que : {state.user.username}",
                foreground=STATUS_SUCCESS_COLOR,
            )
            lines = [f"{key} : {value}" for key, value in state.user.profile.items()]
            self._profile_var.set("\n".join(lines))
        elif state.status is SessionState.RESTORING:
            self._status_label.configure(text="Restauration…", foreground=STATUS_NEUTRAL_COLOR)
        else:
            self._status_label.configure(text="Non connecté", foreground=STATUS_NEUTRAL_COLOR)
            self._profile_var.set("")

    def _restore(self) -> None:
        self._restoring_view.tkraise()
        self.root.update_idletasks()
        status = self._controller.restore_session()
        if status is SessionState.AUTHENTICATED:
            self.navigate(PROFILE_DESTINATION)
        else:
            self.navigate(ROOT_DESTINATION)

    # ----------------------------------------------------------------- Public -
    def run(self) -> None:
        self.root.after(0, self._restore)
        try:
            self.root.mainloop()
        finally:
            self._unsubscribe()
