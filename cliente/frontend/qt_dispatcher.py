"""Dispatcher de consultas sobre QThreadPool con entrega en el hilo de UI."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

from cliente.backend.dispatch import FailureCallback, SuccessCallback

LOGGER = logging.getLogger(__name__)


class _JobSignals(QObject):
    """Senales emitidas desde el hilo de trabajo."""

    succeeded = pyqtSignal(int, object)
    failed = pyqtSignal(int, object)


class _JobRunnable(QRunnable):
    """Ejecuta un trabajo bloqueante fuera del hilo de UI."""

    def __init__(self, job_id: int, job: Callable[[], Any], signals: _JobSignals) -> None:
        super().__init__()
        self._job_id = job_id
        self._job = job
        self._signals = signals

    def run(self) -> None:
        try:
            result = self._job()
        except Exception as exc:  # noqa: BLE001 - el fallo se entrega al hilo de UI
            self._signals.failed.emit(self._job_id, exc)
            return

        self._signals.succeeded.emit(self._job_id, result)


class QtFetchDispatcher(QObject):
    """Corre consultas en un QThreadPool y entrega resultados via senales Qt.

    Las senales se conectan a slots de este objeto, que vive en el hilo de UI,
    asi que los callbacks (y toda escritura al cache) corren en ese hilo.
    """

    def __init__(
        self,
        pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._ids = itertools.count(1)
        self._jobs: dict[int, tuple[_JobSignals, SuccessCallback, FailureCallback]] = {}

    def submit(
        self,
        job: Callable[[], Any],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        job_id = next(self._ids)
        signals = _JobSignals()
        signals.succeeded.connect(self._on_job_succeeded)
        signals.failed.connect(self._on_job_failed)
        self._jobs[job_id] = (signals, on_success, on_failure)
        self._pool.start(_JobRunnable(job_id, job, signals))

    @pyqtSlot(int, object)
    def _on_job_succeeded(self, job_id: int, result: object) -> None:
        entry = self._jobs.pop(job_id, None)
        if entry is None:
            LOGGER.debug("Resultado de trabajo desconocido: %s", job_id)
            return
        _, on_success, _ = entry
        on_success(result)

    @pyqtSlot(int, object)
    def _on_job_failed(self, job_id: int, exc: object) -> None:
        entry = self._jobs.pop(job_id, None)
        if entry is None:
            LOGGER.debug("Fallo de trabajo desconocido: %s", job_id)
            return
        _, _, on_failure = entry
        on_failure(exc if isinstance(exc, Exception) else RuntimeError(str(exc)))
