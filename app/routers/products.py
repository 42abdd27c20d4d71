# app/routers/products.py
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from app.core.auth import require_admin
from app.core.config import Settings, get_settings
from app.core.storage import ObjectStore, get_object_store
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductRead, parse_product_form
from app.services.product_service import ImageUpload, ProductService

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_admin)],
)

repo = ProductRepository()


def get_product_service(
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> ProductService:
    """Wire the service with this process' settings and image store."""
    return ProductService(repo, store, max_upload_bytes=settings.max_upload_bytes)


def read_product_form(
    title: str | None = Form(None),
    title_en: str | None = Form(None),
    brand: str | None = Form(None),
    category: str | None = Form(None),
    description: str | None = Form(None),
    materials: str | None = Form(None),
    case_pack_size: str | None = Form(None),
    msrp: str | None = Form(None),
    barcode: str | None = Form(None),
    dimensions_cm: str | None = Form(None),
    weight_g: str | None = Form(None),
    origin: str | None = Form(None),
    in_stock: str | None = Form(None),
) -> dict[str, str | None]:
    """
    Raw product form fields, all as optional strings.

    `sku` is not read here: update takes it from the path, create declares
    it as its own form field.

    Typing and validation happen in parse_product_form so that bad input
    is reported as 400 with our own messages.
    """
    return {
        "title": title,
        "title_en": title_en,
        "brand": brand,
        "category": category,
        "description": description,
        "materials": materials,
        "case_pack_size": case_pack_size,
        "msrp": msrp,
        "barcode": barcode,
        "dimensions_cm": dimensions_cm,
        "weight_g": weight_g,
        "origin": origin,
        "in_stock": in_stock,
    }


def _read_upload(file: UploadFile | None, max_bytes: int) -> ImageUpload | None:
    """
    Read an uploaded file, at most `max_bytes + 1` bytes of it.

    One byte past the limit is enough for the service to reject the image
    with 413, so oversized uploads are never held in memory in full.
    """
    if file is None:
        return None
    return ImageUpload(
        filename=file.filename or "",
        content_type=file.content_type,
        data=file.file.read(max_bytes + 1),
    )


# -------- Queries --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    skip: int = 0,
    limit: int = 50,
):
    """
    List products ordered by SKU.

    Each item carries `image_url`, the link the list page renders.
    """
    products = service.list_products(session, skip=skip, limit=limit)
    return [ProductRead.from_product(p) for p in products]


@router.get("/{sku}", response_model=ProductRead)
def get_product(
    sku: str,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """Get a single product by SKU."""
    return ProductRead.from_product(service.get_product(session, sku))


# -------- Lifecycle --------


@router.post("", summary="Create a product with its image")
def create_product(
    sku: str | None = Form(None),
    raw: dict[str, str | None] = Depends(read_product_form),
    file: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Create a product from the add-product form (multipart).

    - `sku`, `title` and `file` are required.
    - 409 if the SKU already exists (use the edit form instead).
    - Redirects to the product list on success.
    """
    form = parse_product_form({**raw, "sku": sku})
    image = _read_upload(file, settings.max_upload_bytes)
    service.create_product(session, form, image)
    return RedirectResponse(settings.redirect_url, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{sku}", summary="Update a product, optionally replacing its image")
def update_product(
    sku: str,
    raw: dict[str, str | None] = Depends(read_product_form),
    existing_image_file: str | None = Form(None),
    file: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Update a product from the edit form (multipart).

    - The SKU comes from the path; a `sku` form field is ignored.
    - Every editable field is overwritten.
    - Without a file the current image is kept.
    """
    form = parse_product_form({**raw, "sku": sku})
    service.update_product(
        session,
        sku,
        form,
        image=_read_upload(file, settings.max_upload_bytes),
        existing_image_file=existing_image_file,
    )
    return RedirectResponse(settings.redirect_url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{sku}/delete", summary="Delete a product and its images")
def delete_product(
    sku: str,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Delete a product row and everything stored under its SKU folder.

    Deleting an unknown SKU is a no-op and still redirects.
    """
    service.delete_product(session, sku)
    return RedirectResponse(settings.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
