# app/services/product_service.py
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)
from app.core.image_paths import build_image_key, clean_filename, validate_sku
from app.core.storage import ObjectStore
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductForm

logger = logging.getLogger("uvicorn")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class ImageUpload:
    """An uploaded image, already read from the request."""

    filename: str
    content_type: str | None
    data: bytes

    @property
    def is_empty(self) -> bool:
        # Browsers submit an empty part when no file was picked
        return not self.filename or not self.data


class ProductService:
    """
    Business logic for products and their images.

    Responsibilities:
      - keep the product row and its blobs in step
        (blob "<sku>/<image_file>" is written before the row points at it)
      - upload size limit
      - compensation when the second store fails after the first succeeded

    There is no cross-store transaction. Whatever cannot be compensated is
    logged with SKU and key so it can be cleaned up by hand.
    """

    def __init__(
        self,
        repo: ProductRepository,
        store: ObjectStore,
        max_upload_bytes: int = 10 * 1024 * 1024,
    ):
        self.repo = repo
        self.store = store
        self.max_upload_bytes = max_upload_bytes

    # ----- Helpers -----

    def _check_size(self, image: ImageUpload) -> None:
        if len(image.data) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise PayloadTooLargeError(f"Image too large (max {limit_mb:g}MB).")

    def _store_image(self, sku: str, image: ImageUpload) -> str:
        """
        Upload the image into the SKU folder.

        Returns:
            The canonical filename the row should reference.
        """
        filename = clean_filename(image.filename)
        key = build_image_key(sku, filename)
        self.store.put(key, image.data, image.content_type or DEFAULT_CONTENT_TYPE)
        logger.info(f"Stored image {key} ({len(image.data)} bytes)")
        return filename

    def _discard_blob(self, sku: str, key: str, reason: str) -> None:
        """Best-effort blob removal. Failures are logged, never raised."""
        try:
            self.store.delete(key)
        except StorageError as e:
            logger.error(
                f"Orphaned blob left behind ({reason}): sku={sku} key={key}: {e.detail}"
            )

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_product(self, session: Session, sku: str) -> Product:
        product = self.repo.find_by_sku(session, sku)
        if not product:
            raise NotFoundError("Product not found")
        return product

    # ----- Lifecycle -----

    def create_product(
        self,
        session: Session,
        form: ProductForm,
        image: ImageUpload | None,
    ) -> Product:
        """
        Create a product with its image.

        - SKU must not exist yet (advisory pre-check).
        - Image is stored first, then the row is upserted.
        - If the row write fails the new blob is removed again.
        """
        sku = validate_sku(form.sku)
        if image is None or image.is_empty:
            raise ValidationError("SKU and image file are required")

        if self.repo.find_by_sku(session, sku) is not None:
            raise ConflictError(
                f"SKU '{sku}' already exists. Use edit to change this product."
            )

        self._check_size(image)
        filename = self._store_image(sku, image)

        product = Product(sku=sku, image_file=filename, **form.editable_fields())
        try:
            created = self.repo.upsert(session, product)
        except SQLAlchemyError as e:
            session.rollback()
            self._discard_blob(sku, build_image_key(sku, filename), "create failed")
            raise DatabaseError(f"Failed to save product {sku}: {e}") from e

        logger.info(f"Created product {sku}")
        return created

    def update_product(
        self,
        session: Session,
        sku: str,
        form: ProductForm,
        image: ImageUpload | None = None,
        existing_image_file: str | None = None,
    ) -> Product:
        """
        Overwrite every editable column of an existing product.

        - Without a new image, image_file is kept and storage is untouched.
        - With a new image, the new blob is stored first; the previous blob
          is removed after the row points at the new one.
        """
        sku = validate_sku(sku)
        product = self.get_product(session, sku)
        previous = product.image_file

        if existing_image_file and existing_image_file != previous:
            logger.warning(
                f"Stale edit form for {sku}: form had image {existing_image_file!r}, "
                f"row has {previous!r}"
            )

        fields = form.editable_fields()
        new_filename: str | None = None

        if image is not None and not image.is_empty:
            self._check_size(image)
            new_filename = self._store_image(sku, image)
            fields["image_file"] = new_filename

        try:
            self.repo.update(session, sku, fields)
        except SQLAlchemyError as e:
            session.rollback()
            if new_filename and new_filename != previous:
                self._discard_blob(
                    sku, build_image_key(sku, new_filename), "update failed"
                )
            raise DatabaseError(f"Failed to update product {sku}: {e}") from e

        if new_filename and previous and previous != new_filename:
            self._discard_blob(sku, build_image_key(sku, previous), "image replaced")

        logger.info(f"Updated product {sku}")
        return self.get_product(session, sku)

    def delete_product(self, session: Session, sku: str) -> None:
        """
        Delete a product row and every blob in its SKU folder.

        - Idempotent: an unknown SKU deletes nothing and succeeds.
        - The row goes first; if blob cleanup then fails the folder is
          left behind, logged and reported as StorageError.
        """
        sku = validate_sku(sku)
        prefix = f"{sku}/"

        try:
            self.repo.delete(session, sku)
        except SQLAlchemyError as e:
            session.rollback()
            raise DatabaseError(f"Failed to delete product {sku}: {e}") from e

        keys: list[str] = []
        try:
            keys = self.store.list_by_prefix(prefix)
            self.store.delete(keys)
        except StorageError as e:
            logger.error(
                f"Product {sku} deleted but its images were not: "
                f"prefix={prefix} keys={keys}: {e.detail}"
            )
            raise

        logger.info(f"Deleted product {sku} and {len(keys)} image(s)")
