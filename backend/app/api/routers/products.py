"""CRUD endpoints for the product catalog."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, load_only

from app.api.dependencies.db import get_session
from app.api.schemas.product import (
    MessageResponse,
    ProductAvailabilityUpdate,
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductResponse,
    ProductSummary,
    ValidationErrorResponse,
)
from app.api.validation import Check, body, json_body, path, to_decimal, validate
from app.core.errors import ApiError, ProductNotFoundError
from app.db.models.product import NAME_MAX_LENGTH, PRICE_MAX, PRICE_SCALE, Product

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PRODUCT_ID = 2**31 - 1

ID_RULES = (
    path(
        "product_id",
        Check("integer", "Id must be a number"),
        Check("positive", "Id must be greater than 0"),
    ),
)

PRODUCT_RULES = (
    body(
        "name",
        Check("not_empty", "Name is required"),
        Check("string", "Name must be a string"),
        Check(
            "max_length",
            f"Name must be at most {NAME_MAX_LENGTH} characters",
            NAME_MAX_LENGTH,
        ),
    ),
    body(
        "price",
        Check("not_empty", "Price is required"),
        Check("numeric", "Price must be a number"),
        Check("positive", "Price must be greater than 0"),
        Check("max_value", f"Price must be at most {PRICE_MAX}", PRICE_MAX),
        Check(
            "max_decimals",
            f"Price must have at most {PRICE_SCALE} decimal places",
            PRICE_SCALE,
        ),
    ),
    body(
        "availability",
        Check("boolean", "Availability must be a boolean"),
        optional=True,
    ),
)

# PATCH accepts any subset of the product fields
AVAILABILITY_RULES = tuple(rule.as_optional() for rule in PRODUCT_RULES)

INVALID_INPUT = {
    "model": ValidationErrorResponse,
    "description": "Invalid input data or invalid ID",
}
NOT_FOUND = {"model": MessageResponse, "description": "Product not found"}


def _json_request_body(model) -> dict[str, Any]:
    """OpenAPI requestBody for routes that read the raw JSON payload."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


def _product_id_param():
    return Path(
        ...,
        description="The ID of the product",
        examples=[1],
        le=MAX_PRODUCT_ID,
    )


def _get_or_404(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _apply_fields(product: Product, payload: dict[str, Any]) -> None:
    """Copy validated body fields onto the row; unknown keys are ignored."""
    if "name" in payload:
        product.name = str(payload["name"]).strip()
    if "price" in payload:
        product.price = to_decimal(payload["price"])
    if "availability" in payload:
        product.availability = payload["availability"]


@router.get(
    "",
    summary="Get a list of all products",
    description="Returns an array with all products in the database",
    response_model=ProductListResponse,
)
def list_products(db: Session = Depends(get_session)) -> ProductListResponse:
    """Return every product, most expensive first, without timestamps."""
    query = (
        select(Product)
        .options(
            load_only(Product.id, Product.name, Product.price, Product.availability)
        )
        .order_by(Product.price.desc(), Product.id)
    )
    products = db.scalars(query).all()
    return ProductListResponse(
        data=[ProductSummary.model_validate(p) for p in products]
    )


@router.get(
    "/{product_id}",
    summary="Get a product by ID",
    description="Returns a single product based on the ID",
    response_model=ProductResponse,
    responses={400: INVALID_INPUT, 404: NOT_FOUND},
    dependencies=[Depends(validate(*ID_RULES))],
)
def get_product(
    product_id: int = _product_id_param(),
    db: Session = Depends(get_session),
) -> ProductResponse:
    product = _get_or_404(db, product_id)
    return ProductResponse(data=ProductRead.model_validate(product))


@router.post(
    "",
    summary="Create a new product",
    description="Create a new product with the provided name and price",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductResponse,
    responses={400: INVALID_INPUT},
    dependencies=[Depends(validate(*PRODUCT_RULES))],
    openapi_extra=_json_request_body(ProductCreate),
)
def create_product(
    payload: dict[str, Any] = Depends(json_body),
    db: Session = Depends(get_session),
) -> ProductResponse:
    """Persist a product; availability defaults to true."""
    product = Product(availability=True)
    _apply_fields(product, payload)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"Created product {product.id}")
    return ProductResponse(data=ProductRead.model_validate(product))


@router.put(
    "/{product_id}",
    summary="Update a product by ID",
    description="Update a product with the provided name and price",
    response_model=ProductResponse,
    responses={400: INVALID_INPUT, 404: NOT_FOUND},
    dependencies=[Depends(validate(*ID_RULES, *PRODUCT_RULES))],
    openapi_extra=_json_request_body(ProductCreate),
)
def update_product(
    product_id: int = _product_id_param(),
    payload: dict[str, Any] = Depends(json_body),
    db: Session = Depends(get_session),
) -> ProductResponse:
    """Replace name and price (and availability when supplied)."""
    product = _get_or_404(db, product_id)
    _apply_fields(product, payload)
    db.commit()
    db.refresh(product)

    logger.info(f"Updated product {product_id}")
    return ProductResponse(data=ProductRead.model_validate(product))


@router.patch(
    "/{product_id}",
    summary="Update the availability of a product by ID",
    description="Update the availability of a product based on the ID",
    response_model=ProductResponse,
    responses={400: INVALID_INPUT, 404: NOT_FOUND},
    dependencies=[Depends(validate(*ID_RULES, *AVAILABILITY_RULES))],
    openapi_extra=_json_request_body(ProductAvailabilityUpdate),
)
def update_availability(
    product_id: int = _product_id_param(),
    payload: dict[str, Any] = Depends(json_body),
    db: Session = Depends(get_session),
) -> ProductResponse:
    """Flip availability, then apply any fields in the body.

    The flip happens first, so an explicit ``availability`` in the body
    wins over the toggle.
    """
    product = _get_or_404(db, product_id)
    product.availability = not product.availability
    _apply_fields(product, payload)
    db.commit()
    db.refresh(product)

    logger.info(f"Set availability of product {product_id} to {product.availability}")
    return ProductResponse(data=ProductRead.model_validate(product))


@router.delete(
    "/{product_id}",
    summary="Delete a product by ID",
    description="Delete a product based on the ID",
    response_model=MessageResponse,
    responses={
        400: INVALID_INPUT,
        404: NOT_FOUND,
        500: {"model": MessageResponse, "description": "Internal server error"},
    },
    dependencies=[Depends(validate(*ID_RULES))],
)
def delete_product(
    product_id: int = _product_id_param(),
    db: Session = Depends(get_session),
) -> MessageResponse:
    try:
        product = _get_or_404(db, product_id)
        db.delete(product)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error deleting product {product_id}: {e}", exc_info=True)
        raise ApiError("Internal server error") from e

    logger.info(f"Deleted product {product_id}")
    return MessageResponse(message="Product deleted")
