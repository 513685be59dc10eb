from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from ..services.errors import AuthorizationError, ValidationError
from ..services.session import Session, SessionManager


class LoginDialog(QDialog):
    def __init__(self, *, session_manager: SessionManager, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._session_manager = session_manager
        self._first_run = not session_manager.has_owner()
        self._session: Optional[Session] = None

        self.setWindowTitle("Create Owner Account" if self._first_run else "Sign In")
        self.resize(380, 200)

        layout = QVBoxLayout()
        layout.setContentsMargins(18, 18, 18, 18)
        layout.setSpacing(10)
        self.setLayout(layout)

        if self._first_run:
            intro = QLabel("Set up the owner account used to sign in to this shop.")
            intro.setWordWrap(True)
            layout.addWidget(intro)

        form_layout = QFormLayout()
        layout.addLayout(form_layout)

        self._email_input = QLineEdit()
        self._email_input.setPlaceholderText("owner@example.com")
        form_layout.addRow("Email", self._email_input)

        self._password_input = QLineEdit()
        self._password_input.setEchoMode(QLineEdit.EchoMode.Password)
        form_layout.addRow("Password", self._password_input)

        self._error_label = QLabel()
        self._error_label.setStyleSheet("color: #b91c1c;")
        self._error_label.setWordWrap(True)
        layout.addWidget(self._error_label)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def session(self) -> Optional[Session]:
        return self._session

    def _on_accept(self) -> None:
        email = self._email_input.text()
        password = self._password_input.text()
        try:
            if self._first_run:
                self._session = self._session_manager.register_owner(email, password)
            else:
                self._session = self._session_manager.sign_in(email, password)
        except (AuthorizationError, ValidationError) as exc:
            self._error_label.setText(str(exc))
            self._password_input.clear()
            return
        self.accept()
