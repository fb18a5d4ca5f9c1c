"""Excepciones compartidas del proyecto."""

from __future__ import annotations


class ValidationError(Exception):
    """Error de validacion de datos de entrada."""


class ServiceError(Exception):
    """Error en la ejecucion de servicios."""


class ApiError(ServiceError):
    """Error devuelto por el BFF o por el transporte HTTP."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
