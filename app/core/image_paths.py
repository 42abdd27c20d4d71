# app/core/image_paths.py
"""
Mapping between products and their image keys in object storage.

Layout:
  - new:    "<sku>/<clean filename>"  e.g. "ABC-1/Front_Photo.jpg"
  - legacy: "<name>"                  flat key without extension, served
                                      for requests like "/<name>.jpg"
"""

import re

from app.core.errors import ValidationError
from app.core.storage import ObjectStore, StoredObject

SKU_MAX_LENGTH = 64

_SKU_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_WHITESPACE = re.compile(r"\s+")


def validate_sku(sku: str | None) -> str:
    """
    Check that a SKU can be used as a single storage path segment.

    Rules:
      - 1..64 characters
      - letters, digits, '.', '_' and '-' only, starting with a letter/digit
      - no '..'

    Raises:
        ValidationError: if the SKU is missing or malformed.
    """
    sku = (sku or "").strip()
    if not sku:
        raise ValidationError("SKU is required")
    if len(sku) > SKU_MAX_LENGTH:
        raise ValidationError(f"SKU must be at most {SKU_MAX_LENGTH} characters")
    if not _SKU_PATTERN.match(sku) or ".." in sku:
        raise ValidationError(
            "SKU may only contain letters, digits, '.', '_' and '-'"
        )
    return sku


def clean_filename(raw: str) -> str:
    """
    Canonical image filename.

    - keeps the leaf name only (browsers on Windows may send full paths)
    - collapses every whitespace run into a single '_'

    Idempotent: clean_filename(clean_filename(x)) == clean_filename(x).
    """
    leaf = re.split(r"[/\\]", raw)[-1]
    cleaned = _WHITESPACE.sub("_", leaf)
    if not cleaned:
        raise ValidationError("Image filename is required")
    return cleaned


def build_image_key(sku: str, filename: str) -> str:
    """Storage key of a product image: '<sku>/<clean filename>'."""
    return f"{sku}/{clean_filename(filename)}"


def image_url_for(sku: str, image_file: str | None) -> str | None:
    """Display link for a product image, or None if it has no image."""
    if not image_file:
        return None
    return f"/{build_image_key(sku, image_file)}"


def legacy_key(key: str) -> str:
    """Flat pre-migration key: the key with its extension removed."""
    idx = key.rfind(".")
    if idx == -1:
        return key
    return key[:idx]


def resolve_image(store: ObjectStore, path: str) -> StoredObject | None:
    """
    Resolve a request path to a stored image.

    Flow:
      1. strip the leading '/' => candidate key (new layout)
      2. on miss, strip the extension => legacy flat key
      3. both miss => None

    The hit's content type and etag are returned untouched.
    """
    key = path.removeprefix("/")
    if not key:
        return None

    obj = store.get(key)
    if obj is not None:
        return obj

    fallback = legacy_key(key)
    if not fallback or fallback == key:
        return None
    return store.get(fallback)
