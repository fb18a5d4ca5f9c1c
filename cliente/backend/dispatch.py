"""Despacho de consultas al servidor y entrega de su resultado."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[Exception], None]


class FetchDispatcher(Protocol):
    """Ejecuta un trabajo de I/O y notifica su resultado en el hilo de UI.

    Los callbacks siempre se invocan en el hilo que llamo a ``submit``.
    """

    def submit(
        self,
        job: Callable[[], Any],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        """Agenda ``job`` y reporta su resultado o su excepcion."""


class ImmediateDispatcher:
    """Ejecuta el trabajo en el mismo hilo, antes de retornar de ``submit``."""

    def submit(
        self,
        job: Callable[[], Any],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        try:
            result = job()
        except Exception as exc:  # noqa: BLE001 - el fallo se entrega al callback
            on_failure(exc)
            return

        on_success(result)
