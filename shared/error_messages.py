"""Mensajes amigables para codigos de error del BFF."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from shared.errors import ApiError, ValidationError

ERROR_MESSAGES: dict[str, str] = {
    "UNAUTHORIZED": "Se requiere autenticacion. Inicia sesion nuevamente.",
    "FORBIDDEN": "No tienes permisos para realizar esta accion.",
    "TOKEN_EXPIRED": "Tu sesion expiro. Inicia sesion nuevamente.",
    "ADMIN_ROLE_REQUIRED": "Se requieren privilegios de administrador.",
    "VALIDATION_ERROR": "La validacion fallo. Revisa los campos ingresados.",
    "REQUIRED_FIELD": "Falta un campo obligatorio.",
    "INVALID_ID": "Formato de ID invalido.",
    "PRODUCT_NOT_FOUND": "Producto no encontrado.",
    "SKU_EXISTS": "El SKU ya existe en el sistema.",
    "INVALID_PRICE": "Precio invalido.",
    "INSUFFICIENT_STOCK": "Stock insuficiente para esta operacion.",
    "NETWORK_ERROR": "Fallo la conexion de red. Revisa tu conexion.",
    "TIMEOUT": "La solicitud excedio el tiempo de espera. Intenta nuevamente.",
    "SERVER_ERROR": "Ocurrio un error interno del servidor. Intenta nuevamente.",
    "SERVICE_UNAVAILABLE": "Servicio temporalmente no disponible. Intenta mas tarde.",
    "RATE_LIMIT_EXCEEDED": "Demasiadas solicitudes. Espera antes de reintentar.",
    "UNKNOWN_ERROR": (
        "Ocurrio un error inesperado. Contacta a soporte si el problema persiste."
    ),
}


@dataclass(slots=True)
class ApiErrorInfo:
    """Informacion normalizada de un error de API."""

    code: str
    message: str
    status_code: int | None
    details: Any = None


# ApiError expone los mismos atributos code y status_code.
ErrorInfo = ApiErrorInfo | ApiError


def get_error_message(error_code: str | None, default_message: str | None = None) -> str:
    """Retorna el mensaje amigable para un codigo, o el mensaje por defecto."""
    if error_code and error_code in ERROR_MESSAGES:
        return ERROR_MESSAGES[error_code]
    return default_message or ERROR_MESSAGES["UNKNOWN_ERROR"]


def parse_api_error(status_code: int | None, payload: Any = None) -> ApiErrorInfo:
    """Extrae codigo y mensaje desde una respuesta de error del BFF.

    ``status_code`` es None cuando no hubo respuesta (error de red).
    """
    if status_code is None:
        return ApiErrorInfo(
            code="NETWORK_ERROR",
            message=ERROR_MESSAGES["NETWORK_ERROR"],
            status_code=None,
        )

    data = payload if isinstance(payload, dict) else {}
    nested = data.get("error") if isinstance(data.get("error"), dict) else {}

    error_code = data.get("code") or data.get("errorCode") or nested.get("code")
    backend_message = data.get("message") or nested.get("message")

    return ApiErrorInfo(
        code=error_code or f"HTTP_{status_code}",
        message=get_error_message(error_code, backend_message),
        status_code=status_code,
        details=data.get("details"),
    )


def requires_reauth(info: ErrorInfo) -> bool:
    """Indica si el error obliga a iniciar sesion nuevamente."""
    return info.status_code == 401 or info.code in {"TOKEN_EXPIRED", "UNAUTHORIZED"}


def is_validation_error(info: ErrorInfo) -> bool:
    """Indica si el error corresponde a datos invalidos."""
    return info.status_code == 400 or "VALIDATION" in info.code or "INVALID" in info.code


def is_permission_error(info: ErrorInfo) -> bool:
    """Indica si el error corresponde a permisos insuficientes."""
    return info.status_code == 403 or info.code in {"FORBIDDEN", "ADMIN_ROLE_REQUIRED"}


def describe_failure(exc: Exception) -> tuple[bool, str]:
    """Retorna (es_advertencia, mensaje) para mostrar el fallo de una accion.

    Datos invalidos y permisos insuficientes se muestran como advertencia;
    el resto como error, con el codigo del BFF cuando existe.
    """
    if isinstance(exc, ValidationError):
        return True, str(exc)
    if not isinstance(exc, ApiError):
        return False, str(exc)

    warning = is_validation_error(exc) or is_permission_error(exc)
    return warning, f"{exc}\n\nCodigo: {exc.code}"
