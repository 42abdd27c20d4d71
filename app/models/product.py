from decimal import Decimal

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Identity:
      - sku: immutable once created; also the image folder in object storage.

    Image:
      - image_file holds the leaf filename only (no folder), with whitespace
        replaced by '_'. The blob lives at "<sku>/<image_file>".
    """

    __tablename__ = "products"

    sku: str = Field(
        primary_key=True,
        max_length=64,
        description="Product code (SKU), also the image folder name",
    )

    title: str = Field(description="Display name of the product")

    title_en: str | None = Field(default=None, description="English name")

    brand: str | None = Field(default=None)

    category: str | None = Field(default=None, index=True)

    description: str | None = Field(default=None)

    materials: str | None = Field(
        default=None,
        description="Ingredients / materials",
    )

    image_file: str | None = Field(
        default=None,
        description="Image filename inside the SKU folder",
    )

    case_pack_size: int | None = Field(
        default=None,
        ge=0,
        description="Units per case",
    )

    msrp: Decimal | None = Field(
        default=None,
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Suggested retail price",
    )

    barcode: str | None = Field(default=None)

    dimensions_cm: str | None = Field(default=None)

    weight_g: Decimal | None = Field(
        default=None,
        ge=0,
        max_digits=10,
        decimal_places=1,
    )

    origin: str | None = Field(default=None)

    in_stock: str = Field(
        default="N",
        max_length=1,
        description="Stock flag: Y | N",
    )
