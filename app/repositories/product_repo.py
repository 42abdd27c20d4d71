# app/repositories/product_repo.py
from typing import Any

from sqlalchemy import delete, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no storage, no business logic.
    """

    def find_by_sku(self, session: Session, sku: str) -> Product | None:
        """Return a Product by SKU, or None if not found."""
        return session.get(Product, sku)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[Product]:
        """Products ordered by SKU, paginated with skip/limit."""
        stmt = select(Product).order_by(Product.sku).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def upsert(self, session: Session, product: Product) -> Product:
        """
        Insert a product, or overwrite every column of the row with the
        same SKU.

        Runs as a single INSERT ... ON CONFLICT (sku) DO UPDATE.
        """
        values = product.model_dump()
        insert = self._insert_for(session)
        stmt = insert(Product.__table__).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["sku"],
            set_={col: stmt.excluded[col] for col in values if col != "sku"},
        )
        session.exec(stmt)
        session.commit()
        return self.find_by_sku(session, product.sku)

    def update(self, session: Session, sku: str, fields: dict[str, Any]) -> int:
        """
        UPDATE products SET ... WHERE sku = :sku

        Returns:
            Number of rows changed (0 if the SKU does not exist).
        """
        stmt = update(Product).where(Product.sku == sku).values(**fields)
        result = session.exec(stmt)
        session.commit()
        return result.rowcount

    def delete(self, session: Session, sku: str) -> int:
        """Delete the row for `sku`. Deleting an absent SKU is a no-op."""
        stmt = delete(Product).where(Product.sku == sku)
        result = session.exec(stmt)
        session.commit()
        return result.rowcount

    @staticmethod
    def _insert_for(session: Session):
        """Dialect-specific insert() that supports ON CONFLICT."""
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Upsert is not supported on {dialect}")
