# app/routers/images.py
from fastapi import APIRouter, Depends, Response

from app.core.auth import require_admin
from app.core.config import Settings, get_settings
from app.core.errors import NotFoundError
from app.core.image_paths import resolve_image
from app.core.storage import ObjectStore, get_object_store

# With ENABLE_AUTH on, images need the same basic auth as the admin routes
router = APIRouter(tags=["Images"], dependencies=[Depends(require_admin)])


@router.get("/{key:path}", summary="Serve a stored image")
def get_image(
    key: str,
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
):
    """
    Serve an image by storage key.

    - "/ABC-1/front.jpg" => key "ABC-1/front.jpg" (per-SKU folder)
    - falls back to the legacy flat key "front" style lookup
    - both hits and 404s are cacheable

    Must be registered after every other route: it matches any path.
    """
    cache_control = f"public, max-age={settings.IMAGE_CACHE_SECONDS}"

    obj = resolve_image(store, key)
    if obj is None:
        raise NotFoundError("Image not found", headers={"Cache-Control": cache_control})

    return Response(
        content=obj.body,
        media_type=obj.content_type,
        headers={
            "ETag": obj.etag,
            "Content-Disposition": "inline",
            "Cache-Control": cache_control,
        },
    )
