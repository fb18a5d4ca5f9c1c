"""Generacion de SKU para variantes de producto.

El mismo algoritmo se usa como preview en el cliente y en el servidor local,
pero el SKU definitivo siempre lo asigna el servidor al guardar.
"""

from __future__ import annotations

import re
import unicodedata

SKU_SEPARATOR = "-"
MAX_BASE_LENGTH = 10
MIN_BASE_LENGTH = 2
PADDED_BASE_LENGTH = 4
PADDING_CHAR = "P"

CANONICAL_SIZE_CODES: dict[str, str] = {
    "extra small": "XS",
    "small": "S",
    "medium": "M",
    "large": "L",
    "extra large": "XL",
    "xxl": "XXL",
}

_WORD_JOINERS_PATTERN = re.compile(r"[-_/]")
_NON_ALNUM_PATTERN = re.compile(r"[^a-zA-Z0-9\s]")
_LETTER_PATTERN = re.compile(r"[a-zA-Z]")
_DIGIT_RUN_PATTERN = re.compile(r"[0-9]+")


def generate_sku(
    product_name: str,
    color: str | None = None,
    size: str | None = None,
) -> str:
    """Construye un SKU en formato BASE[-COL][-TALLA].

    Nunca falla: un nombre vacio o sin caracteres alfanumericos produce la
    base ``PPPP``.
    """
    segments = [build_base_segment(product_name)]

    if color:
        segments.append(build_color_segment(color))

    if size:
        segments.append(build_size_segment(size))

    return SKU_SEPARATOR.join(segments)


def build_base_segment(product_name: str) -> str:
    """Iniciales de cada palabra seguidas de la primera serie de digitos de cada una."""
    initials = ""
    numbers = ""

    for word in _split_words(product_name):
        if _LETTER_PATTERN.fullmatch(word[0]):
            initials += word[0].upper()

        digit_run = _DIGIT_RUN_PATTERN.search(word)
        if digit_run is not None:
            numbers += digit_run.group(0)

    code = (initials + numbers)[:MAX_BASE_LENGTH]
    if len(code) < MIN_BASE_LENGTH:
        code = code.ljust(PADDED_BASE_LENGTH, PADDING_CHAR)

    return code.upper()


def build_color_segment(color: str) -> str:
    """Retorna los primeros 3 caracteres del color en mayusculas."""
    return color[:3].upper()


def build_size_segment(size: str) -> str:
    """Resuelve la talla canonica, o la primera serie de digitos, o sus 3 primeros caracteres."""
    canonical = CANONICAL_SIZE_CODES.get(size.strip().lower())
    if canonical is not None:
        return canonical

    digit_run = _DIGIT_RUN_PATTERN.search(size)
    if digit_run is not None:
        return digit_run.group(0)

    return size[:3].upper()


def _split_words(product_name: str) -> list[str]:
    """Normaliza el nombre a ASCII alfanumerico y lo separa en palabras."""
    normalized = unicodedata.normalize("NFKD", product_name or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    # "T-Shirt" cuenta como dos palabras.
    spaced = _WORD_JOINERS_PATTERN.sub(" ", ascii_text)
    return _NON_ALNUM_PATTERN.sub("", spaced).split()
