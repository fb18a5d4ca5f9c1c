"""Helpers de dialogos para frontend."""

from __future__ import annotations

from PyQt6.QtWidgets import QMessageBox, QWidget

from shared.error_messages import describe_failure


def show_info(parent: QWidget | None, title: str, message: str) -> None:
    """Muestra un dialogo informativo."""
    QMessageBox.information(parent, title, message)


def show_error(parent: QWidget | None, title: str, message: str) -> None:
    """Muestra un dialogo de error."""
    QMessageBox.critical(parent, title, message)


def show_failure(parent: QWidget | None, title: str, exc: Exception) -> None:
    """Muestra el fallo de una accion como advertencia o error segun su tipo."""
    warning, message = describe_failure(exc)
    if warning:
        QMessageBox.warning(parent, title, message)
        return
    show_error(parent, title, message)
