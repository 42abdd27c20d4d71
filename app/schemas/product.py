# app/schemas/product.py
from decimal import Decimal
from typing import Any, Literal

from pydantic import ConfigDict, ValidationError as PydanticValidationError, field_validator
from sqlmodel import SQLModel, Field

from app.core.errors import ValidationError
from app.core.image_paths import image_url_for, validate_sku
from app.models.product import Product


class ProductForm(SQLModel):
    """
    Typed product input, parsed once from the submitted form.

    - blank strings are treated as missing
    - numbers are coerced from their string form
    - sku follows the storage path-segment rule (see validate_sku)
    """

    model_config = ConfigDict(extra="ignore")

    sku: str
    title: str = Field(max_length=255)
    title_en: str | None = None
    brand: str | None = None
    category: str | None = None
    description: str | None = None
    materials: str | None = None
    case_pack_size: int | None = Field(default=None, ge=0)
    msrp: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    barcode: str | None = None
    dimensions_cm: str | None = None
    weight_g: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=1)
    origin: str | None = None
    in_stock: Literal["Y", "N"] = "N"

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
        return v

    @field_validator("in_stock", mode="before")
    @classmethod
    def default_stock_flag(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "N"
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("sku")
    @classmethod
    def check_sku(cls, v: str) -> str:
        try:
            return validate_sku(v)
        except ValidationError as e:
            raise ValueError(e.detail) from e

    def editable_fields(self) -> dict[str, Any]:
        """Every column except the key and the image, for full overwrites."""
        return self.model_dump(exclude={"sku"})


def parse_product_form(raw: dict[str, str | None]) -> ProductForm:
    """
    Build a ProductForm from raw form values.

    Raises:
        ValidationError(400): listing every invalid field.
    """
    if not (raw.get("sku") or "").strip():
        raise ValidationError("SKU is required")

    # Browsers post empty inputs as "", drop them so defaults apply
    values = {k: v for k, v in raw.items() if v is not None and v.strip()}
    try:
        return ProductForm.model_validate(values)
    except PydanticValidationError as e:
        problems = []
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "form"
            problems.append(f"{field}: {err['msg']}")
        raise ValidationError("; ".join(problems)) from e


class ProductRead(SQLModel):
    """
    Product representation for the admin list.

    `image_url` is the display link, built with the same filename
    canonicalization as the storage key so it always resolves.
    """

    sku: str
    title: str
    title_en: str | None = None
    brand: str | None = None
    category: str | None = None
    description: str | None = None
    materials: str | None = None
    image_file: str | None = None
    image_url: str | None = None
    case_pack_size: int | None = None
    msrp: Decimal | None = None
    barcode: str | None = None
    dimensions_cm: str | None = None
    weight_g: Decimal | None = None
    origin: str | None = None
    in_stock: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductRead":
        return cls(
            **product.model_dump(),
            image_url=image_url_for(product.sku, product.image_file),
        )
