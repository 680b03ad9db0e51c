"""
Product API — Product Service
===============================

What:  One database operation per method for the product CRUD endpoints.
Why:   Keeps route handlers thin (HTTP concerns only) and testable logic here.
How:   Each method receives the request's AsyncSession, runs a single
       statement or ORM operation, and returns response schemas.
Who:   Called by route handlers in app/routes/products.py.

Error Handling Strategy:
    - Unknown or malformed ids → NotFoundError (404)
    - Any other driver/ORM failure → DatabaseError (500, details logged only)
    - Our own exceptions propagate unchanged
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ProductAPIError
from app.models.product import Product, utcnow
from app.schemas.product import (
    DeleteResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


def parse_product_id(product_id: str) -> UUID:
    """
    Parse a path identifier into a UUID.

    Malformed identifiers can never match a stored product, so they are
    reported the same way as unknown ones.
    """
    try:
        return UUID(product_id)
    except (ValueError, TypeError, AttributeError):
        raise NotFoundError(resource="product", resource_id=str(product_id))


class ProductService:
    """
    Business logic layer for product operations.

    Stateless: the session is passed into every call, so one shared
    instance serves all requests.
    """

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        """
        Persist a new product and return it with its generated id.

        flush() sends the INSERT so id and timestamps are populated; the
        commit happens in get_db_session once the handler returns.
        """
        try:
            product = Product(**data.model_dump())
            db.add(product)
            await db.flush()
            logger.info("Product created: %s", product.id)
            return ProductResponse.model_validate(product)
        except ProductAPIError:
            raise
        except Exception as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the product. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        """Return every product in insertion order. Full scan, no pagination."""
        try:
            result = await db.execute(
                select(Product).order_by(Product.created_at, Product.id)
            )
            return [ProductResponse.model_validate(p) for p in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_product(self, db: AsyncSession, product_id: str) -> ProductResponse:
        """
        Retrieve a single product.

        Raises:
            NotFoundError: id is malformed or no product has it (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        product = await self._load(db, product_id)
        return ProductResponse.model_validate(product)

    async def update_product(
        self, db: AsyncSession, product_id: str, data: ProductUpdate
    ) -> ProductResponse:
        """
        Replace the fields present in the request body.

        Fields the client did not send keep their stored values. An unknown
        id raises NotFoundError before anything is written, so an update
        never creates a record.
        """
        product = await self._load(db, product_id)
        changes = data.model_dump(exclude_unset=True)

        try:
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = utcnow()
            await db.flush()
            logger.info("Product updated: %s (%s)", product.id, ", ".join(sorted(changes)) or "no fields")
            return ProductResponse.model_validate(product)
        except Exception as e:
            logger.error("Database error updating product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"product_id": str(product_id)},
            )

    async def delete_product(self, db: AsyncSession, product_id: str) -> DeleteResponse:
        """Remove a product; unknown or malformed ids raise NotFoundError."""
        product = await self._load(db, product_id)

        try:
            await db.delete(product)
            await db.flush()
            logger.info("Product deleted: %s", product.id)
            return DeleteResponse(id=product.id)
        except Exception as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"product_id": str(product_id)},
            )

    async def _load(self, db: AsyncSession, product_id: str) -> Product:
        uid = parse_product_id(product_id)
        try:
            result = await db.execute(select(Product).where(Product.id == uid))
            product: Optional[Product] = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": str(product_id)},
            )

        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        return product


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
