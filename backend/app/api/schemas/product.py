"""Pydantic models describing Product payloads."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.db.models.product import NAME_MAX_LENGTH, PRICE_MAX


class ProductCreate(BaseModel):
    """Request body accepted by create and full update."""

    name: str = Field(..., max_length=NAME_MAX_LENGTH, examples=["Monitor Stand"])
    price: float = Field(
        ..., gt=0, le=float(PRICE_MAX), description="At most 2 decimal places", examples=[19.99]
    )
    availability: bool = Field(True, examples=[True])


class ProductAvailabilityUpdate(BaseModel):
    """Optional fields applied after the availability toggle."""

    name: str | None = Field(None, max_length=NAME_MAX_LENGTH)
    price: float | None = Field(None, gt=0, le=float(PRICE_MAX))
    availability: bool | None = Field(None, examples=[True])


class ProductSummary(BaseModel):
    id: int = Field(..., description="The product ID", examples=[1])
    name: str = Field(..., description="The product name", examples=["Apple"])
    price: float = Field(..., description="The product price", examples=[1.99])
    availability: bool = Field(
        ..., description="The product availability", examples=[True]
    )

    model_config = ConfigDict(from_attributes=True)


class ProductRead(ProductSummary):
    created_at: datetime | None = Field(
        None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime | None = Field(
        None,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
    )


class ProductResponse(BaseModel):
    data: ProductRead


class ProductListResponse(BaseModel):
    data: list[ProductSummary]


class MessageResponse(BaseModel):
    message: str


class FieldErrorRead(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    errors: list[FieldErrorRead]
