"""Parametros globales del proyecto."""

from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

BFF_URL = os.environ.get("ADMIN_BFF_URL", "http://localhost:8014")
ADMIN_API_TOKEN = os.environ.get("ADMIN_API_TOKEN", "")
HTTP_TIMEOUT_SECONDS = float(os.environ.get("ADMIN_HTTP_TIMEOUT", "10.0"))
USE_LOCAL_SERVER = os.environ.get("ADMIN_OFFLINE", "").strip().lower() in {
    "1",
    "true",
    "yes",
    "si",
}

PRODUCTS_ENDPOINT = "/api/admin/products"
INVENTORY_BATCH_ENDPOINT = "/api/admin/inventory/batch"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
