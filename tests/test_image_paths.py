"""Tests for image key construction and request resolution."""
import pytest

from app.core.errors import ValidationError
from app.core.image_paths import (
    build_image_key,
    clean_filename,
    image_url_for,
    legacy_key,
    resolve_image,
    validate_sku,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Front Photo.jpg", "Front_Photo.jpg"),
        ("a  b\tc\nd.png", "a_b_c_d.png"),
        (" lead.jpg", "_lead.jpg"),
        ("plain.jpg", "plain.jpg"),
        ("C:\\Users\\me\\My Pic.jpg", "My_Pic.jpg"),
        ("dir/sub/x y.webp", "x_y.webp"),
    ],
)
def test_clean_filename(raw, expected):
    assert clean_filename(raw) == expected


def test_clean_filename_is_idempotent():
    once = clean_filename("Front   Photo (1).jpg")
    assert clean_filename(once) == once


def test_clean_filename_rejects_empty():
    with pytest.raises(ValidationError):
        clean_filename("some/dir/")


def test_storage_key_and_display_link_agree():
    """The rendered link resolves to the key the upload was stored under."""
    key = build_image_key("ABC-1", "Front Photo.jpg")
    assert key == "ABC-1/Front_Photo.jpg"
    assert image_url_for("ABC-1", "Front Photo.jpg") == f"/{key}"
    assert image_url_for("ABC-1", "Front_Photo.jpg") == f"/{key}"


def test_image_url_for_product_without_image():
    assert image_url_for("ABC-1", None) is None


@pytest.mark.parametrize("sku", ["ABC-1", "a", "sku_2.v3", "9" * 64])
def test_validate_sku_accepts(sku):
    assert validate_sku(sku) == sku


def test_validate_sku_strips_whitespace():
    assert validate_sku("  ABC-1 ") == "ABC-1"


@pytest.mark.parametrize(
    "sku",
    ["", None, "   ", "a/b", "../etc", "a..b", ".hidden", "-x", "has space", "x" * 65, "中文"],
)
def test_validate_sku_rejects(sku):
    with pytest.raises(ValidationError):
        validate_sku(sku)


def test_legacy_key_strips_last_extension():
    assert legacy_key("1700000000000.jpg") == "1700000000000"
    assert legacy_key("archive.tar.gz") == "archive.tar"
    assert legacy_key("noext") == "noext"


def test_resolve_new_layout(store):
    store.put("ABC-1/Front_Photo.jpg", b"new", "image/jpeg")

    obj = resolve_image(store, "/ABC-1/Front_Photo.jpg")

    assert obj.body == b"new"
    assert obj.content_type == "image/jpeg"


def test_resolve_falls_back_to_legacy_flat_key(store):
    store.put("1700000000000", b"legacy", "image/png")

    obj = resolve_image(store, "/1700000000000.png")

    assert obj.key == "1700000000000"
    assert obj.body == b"legacy"
    assert obj.content_type == "image/png"
    assert [c for c in store.calls if c[0] == "get"] == [
        ("get", "1700000000000.png"),
        ("get", "1700000000000"),
    ]


def test_resolve_prefers_new_layout_over_legacy(store):
    store.put("photo.jpg", b"new", "image/jpeg")
    store.put("photo", b"legacy", "image/jpeg")

    assert resolve_image(store, "/photo.jpg").body == b"new"


def test_resolve_miss(store):
    assert resolve_image(store, "/ABC-1/missing.jpg") is None


def test_resolve_without_extension_looks_up_once(store):
    assert resolve_image(store, "/noext") is None
    assert store.calls == [("get", "noext")]


def test_resolve_empty_path(store):
    assert resolve_image(store, "/") is None
    assert store.calls == []
