"""Gateway de comunicacion cliente-servidor."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Protocol

import httpx

from parametros import (
    ADMIN_API_TOKEN,
    BFF_URL,
    HTTP_TIMEOUT_SECONDS,
    INVENTORY_BATCH_ENDPOINT,
    PRODUCTS_ENDPOINT,
)
from servidor.domain.models import StockLevel, StoredProduct
from servidor.services.catalog_service import CatalogService
from shared.error_messages import ERROR_MESSAGES, parse_api_error, requires_reauth
from shared.errors import ApiError, ServiceError
from shared.protocol import (
    CreateProductRequest,
    CreateProductResponse,
    InventoryBatchRequest,
    InventoryBatchResponse,
    InventoryRecord,
    ListProductsRequest,
    ListProductsResponse,
    ProductDraft,
    ProductSummary,
    ProductVariant,
)

LOGGER = logging.getLogger(__name__)


class ServerGateway(Protocol):
    """Interfaz de acceso del cliente a servicios del servidor."""

    def list_products(self, request: ListProductsRequest) -> ListProductsResponse:
        """Solicita el listado de productos."""

    def create_product(self, request: CreateProductRequest) -> CreateProductResponse:
        """Solicita la creacion de un producto con sus variantes."""

    def fetch_inventory_batch(
        self,
        request: InventoryBatchRequest,
    ) -> InventoryBatchResponse:
        """Solicita inventario para un lote de SKU."""


class LocalServerGateway:
    """Implementacion local del gateway usando servicios en memoria."""

    def __init__(self, catalog_service: CatalogService | None = None) -> None:
        self._catalog_service = catalog_service or CatalogService()

    def list_products(self, request: ListProductsRequest) -> ListProductsResponse:
        """Lista productos del catalogo en memoria."""
        try:
            products = self._catalog_service.list_products(
                search=request.search,
                category=request.category,
                status=request.status,
            )
        except ServiceError:
            raise
        except Exception as exc:
            LOGGER.exception("Fallo inesperado al listar productos.")
            raise ServiceError("No fue posible listar los productos.") from exc

        return ListProductsResponse(products=[_summary_from_stored(p) for p in products])

    def create_product(self, request: CreateProductRequest) -> CreateProductResponse:
        """Crea el producto delegando en el servicio de catalogo."""
        try:
            product = self._catalog_service.create_product(request.product)
        except ServiceError:
            raise
        except Exception as exc:
            LOGGER.exception("Fallo inesperado al crear producto.")
            raise ServiceError("No fue posible crear el producto.") from exc

        return CreateProductResponse(product=_summary_from_stored(product))

    def fetch_inventory_batch(
        self,
        request: InventoryBatchRequest,
    ) -> InventoryBatchResponse:
        """Consulta inventario por lote; los SKU sin stock registrado se omiten."""
        try:
            levels = self._catalog_service.inventory_service.get_batch(request.skus)
        except ServiceError:
            raise
        except Exception as exc:
            LOGGER.exception("Fallo inesperado al consultar inventario.")
            raise ServiceError("No fue posible consultar el inventario.") from exc

        return InventoryBatchResponse(
            records={sku: _record_from_level(level) for sku, level in levels.items()}
        )


class HttpServerGateway:
    """Implementacion del gateway contra el BFF via HTTP."""

    def __init__(
        self,
        base_url: str = BFF_URL,
        token: str = ADMIN_API_TOKEN,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def list_products(self, request: ListProductsRequest) -> ListProductsResponse:
        """Obtiene productos desde el BFF aplicando filtros opcionales."""
        params = {
            key: value
            for key, value in (
                ("search", request.search.strip()),
                ("category", request.category.strip()),
                ("status", request.status.strip()),
            )
            if value
        }
        payload = _unwrap(self._request("GET", PRODUCTS_ENDPOINT, params=params))
        if not isinstance(payload, list):
            raise ServiceError("Respuesta invalida del servidor al listar productos.")

        return ListProductsResponse(products=[_summary_from_json(raw) for raw in payload])

    def create_product(self, request: CreateProductRequest) -> CreateProductResponse:
        """Envia el producto al BFF; el servidor asigna los SKU definitivos."""
        payload = _unwrap(
            self._request("POST", PRODUCTS_ENDPOINT, json=_draft_to_json(request.product))
        )
        if not isinstance(payload, dict):
            raise ServiceError("Respuesta invalida del servidor al crear producto.")

        return CreateProductResponse(product=_summary_from_json(payload))

    def fetch_inventory_batch(
        self,
        request: InventoryBatchRequest,
    ) -> InventoryBatchResponse:
        """Consulta inventario por lote en una sola llamada."""
        payload = _unwrap(
            self._request(
                "POST",
                INVENTORY_BATCH_ENDPOINT,
                json={"skus": list(request.skus)},
            )
        )
        if not isinstance(payload, dict):
            raise ServiceError("Respuesta invalida del servidor al consultar inventario.")

        records: dict[str, InventoryRecord] = {}
        for sku, raw in payload.items():
            if not isinstance(raw, dict):
                continue
            records[sku] = _record_from_json(sku, raw)
        return InventoryBatchResponse(records=records)

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Ejecuta la llamada y traduce errores de transporte y de API a ApiError."""
        headers = {"x-correlation-id": str(uuid.uuid4())}
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            LOGGER.error("Timeout en %s %s", method, url)
            raise ApiError(ERROR_MESSAGES["TIMEOUT"], code="TIMEOUT") from exc
        except httpx.HTTPError as exc:
            info = parse_api_error(None)
            LOGGER.error("Error de red en %s %s: %s", method, url, exc)
            raise ApiError(info.message, code=info.code) from exc

        if response.is_error:
            info = parse_api_error(response.status_code, _safe_json(response))
            LOGGER.error(
                "Error de API: %s %s -> %s (%s) correlation_id=%s",
                method,
                url,
                info.status_code,
                info.code,
                response.headers.get("x-correlation-id", headers["x-correlation-id"]),
            )
            if requires_reauth(info):
                LOGGER.warning("Sesion expirada; se requiere iniciar sesion nuevamente.")
            raise ApiError(info.message, code=info.code, status_code=info.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError(f"Respuesta no JSON desde {url}.") from exc


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _unwrap(payload: Any) -> Any:
    """Extrae ``data`` de las respuestas envueltas como {success, data}."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _parse_timestamp(value: Any) -> datetime | None:
    """Parsea timestamps ISO-8601, aceptando sufijo Z."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        LOGGER.debug("Timestamp de inventario invalido: %s", value)
        return None


def _record_from_json(sku: str, raw: dict[str, Any]) -> InventoryRecord:
    return InventoryRecord(
        sku=sku,
        quantity_available=int(raw.get("quantityAvailable") or 0),
        quantity_reserved=int(raw.get("quantityReserved") or 0),
        reorder_point=int(raw.get("reorderPoint") or 0),
        updated_at=_parse_timestamp(raw.get("updatedAt")),
    )


def _record_from_level(level: StockLevel) -> InventoryRecord:
    return InventoryRecord(
        sku=level.sku,
        quantity_available=level.quantity_available,
        quantity_reserved=level.quantity_reserved,
        reorder_point=level.reorder_point,
        updated_at=level.updated_at,
    )


def _summary_from_json(raw: dict[str, Any]) -> ProductSummary:
    """Mapea un producto del BFF al DTO del listado."""
    taxonomy = raw.get("taxonomy") if isinstance(raw.get("taxonomy"), dict) else {}
    variants = [
        ProductVariant(
            sku=variant.get("sku") or None,
            color=variant.get("color") or "",
            size=variant.get("size") or "",
            initial_stock=int(variant.get("initial_stock") or 0),
        )
        for variant in raw.get("variants") or []
        if isinstance(variant, dict)
    ]
    return ProductSummary(
        product_id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or "",
        price=float(raw.get("price") or 0.0),
        sku=raw.get("sku") or "",
        description=raw.get("description") or "",
        brand=raw.get("brand") or "",
        category=raw.get("category") or taxonomy.get("category") or "",
        status="active" if raw.get("is_active", True) else "inactive",
        variants=variants,
    )


def _summary_from_stored(product: StoredProduct) -> ProductSummary:
    return ProductSummary(
        product_id=product.product_id,
        name=product.name,
        price=product.price,
        sku=product.sku,
        description=product.description,
        brand=product.brand,
        category=product.category,
        status="active" if product.is_active else "inactive",
        variants=[
            ProductVariant(sku=variant.sku, color=variant.color, size=variant.size)
            for variant in product.variants
        ],
    )


def _draft_to_json(draft: ProductDraft) -> dict[str, Any]:
    """Serializa el draft al formato del BFF omitiendo campos vacios."""
    variants: list[dict[str, Any]] = []
    for variant in draft.variants:
        item: dict[str, Any] = {"initial_stock": variant.initial_stock}
        if variant.color.strip():
            item["color"] = variant.color.strip()
        if variant.size.strip():
            item["size"] = variant.size.strip()
        variants.append(item)

    body: dict[str, Any] = {
        "name": draft.name.strip(),
        "description": draft.description.strip(),
        "price": draft.price,
        "variants": variants,
        "status": "active",
    }
    if draft.brand.strip():
        body["brand"] = draft.brand.strip()
    if draft.category.strip():
        body["taxonomy"] = {"category": draft.category.strip()}
    return body
