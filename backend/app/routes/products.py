"""
Product API — Product Route Handlers
======================================

What:  Maps the five product endpoints to ProductService calls.
How:   Extracts path/body data, delegates to the service, returns JSON.

Endpoints:
    GET    /api/products        → list every product
    GET    /api/products/{id}   → single product or 404
    POST   /api/products        → create, 201 with the stored product
    PUT    /api/products/{id}   → update present fields, or 404
    DELETE /api/products/{id}   → confirmation or 404

Collection routes also answer on "/api/products/" directly instead of
redirecting, so a static site mounted at "/" cannot swallow them.

Bodies are accepted as JSON or as HTML-form encoding
(application/x-www-form-urlencoded, multipart/form-data) and validated
against the same schema either way; failures raise ValidationError (400).

The id is taken as a plain string so that malformed ids produce the same
404 as unknown ones instead of FastAPI's 422 path validation error.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Type, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import ValidationError
from app.schemas.product import (
    DeleteResponse,
    ErrorResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from app.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)


# ── Request Body Parsing ──────────────────────────────────────────────────

async def read_body(request: Request) -> Dict[str, Any]:
    """
    Decode the request body into a plain dict by Content-Type.

    Form fields arrive as strings; pydantic's lax mode converts "3" and
    "9.99" to the numeric field types afterwards.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    raw = await request.body()
    try:
        data = json.loads(raw) if raw else None
    except ValueError:
        raise ValidationError(message="Request body is not valid JSON")
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return data


def validated_body(schema: Type[SchemaT]) -> Callable:
    """Build a dependency that parses the body and validates it against `schema`."""

    async def dependency(request: Request) -> SchemaT:
        data = await read_body(request)
        try:
            return schema.model_validate(data)
        except pydantic.ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(part) for part in err.get("loc", ())),
                    "message": err.get("msg", ""),
                    "type": err.get("type", ""),
                }
                for err in e.errors()
            ]
            raise ValidationError(
                message="Request body is missing required fields or contains invalid values",
                context={"errors": errors},
            )

    return dependency


def body_docs(schema: Type[pydantic.BaseModel]) -> Dict[str, Any]:
    """OpenAPI requestBody for a route whose body is parsed by validated_body."""
    json_schema = schema.model_json_schema()
    return {
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": json_schema},
                "application/x-www-form-urlencoded": {"schema": json_schema},
            },
        }
    }


# ── Routes ────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=List[ProductResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all products",
)
@router.get("/", response_model=List[ProductResponse], include_in_schema=False)
async def list_products(
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.list_products(db)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single product by ID",
)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.get_product(db, product_id)


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a product",
    openapi_extra=body_docs(ProductCreate),
)
@router.post("/", status_code=201, response_model=ProductResponse, include_in_schema=False)
async def create_product(
    payload: ProductCreate = Depends(validated_body(ProductCreate)),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    """
    Create a product.

    The body is validated before the database session is used; a body
    without a name is answered with 400 and nothing is persisted.
    """
    return await product_service.create_product(db, payload)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a product",
    openapi_extra=body_docs(ProductUpdate),
)
async def update_product(
    product_id: str,
    payload: ProductUpdate = Depends(validated_body(ProductUpdate)),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.update_product(db, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=DeleteResponse,
    responses={
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    return await product_service.delete_product(db, product_id)
