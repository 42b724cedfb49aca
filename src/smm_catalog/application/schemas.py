"""Pydantic schemas for catalog API."""
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.smm_catalog.domain.models import Category, Service
from src.smm_common.cents import MAX_PRICE_CENTS, cents_to_display
from src.smm_common.datetime_utils import iso_or_empty


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class ServiceCreateRequest(BaseModel):
    category_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    price_cents: int = Field(
        ..., gt=0, le=MAX_PRICE_CENTS, description="Price per 1000 units, in cents"
    )
    processing_time_hours: int = Field(24, ge=0, le=24 * 365)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=2048)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)

    def to_fields(self) -> dict[str, object]:
        return {
            "category_id": str(self.category_id),
            "name": self.name,
            "price": self.price_cents,
            "processing_time_hours": self.processing_time_hours,
            "description": self.description,
            "image_url": self.image_url,
        }


class ServiceUpdateRequest(BaseModel):
    """Partial update: only fields present in the body are written."""

    category_id: UUID | None = None
    name: str | None = Field(None, min_length=1, max_length=200)
    price_cents: int | None = Field(None, gt=0, le=MAX_PRICE_CENTS)
    processing_time_hours: int | None = Field(None, ge=0, le=24 * 365)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=2048)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    def to_fields(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        fields: dict[str, object] = {}
        for key, value in data.items():
            if key == "price_cents":
                if value is not None:
                    fields["price"] = value
            elif key == "category_id":
                if value is not None:
                    fields["category_id"] = str(value)
            elif key in ("name", "processing_time_hours"):
                if value is not None:
                    fields[key] = value
            else:
                fields[key] = value
        return fields


class CategoryItem(BaseModel):
    id: str
    name: str
    service_count: int
    created_at: str

    @classmethod
    def from_domain(cls, c: Category) -> "CategoryItem":
        return cls(
            id=c.id,
            name=c.name,
            service_count=c.service_count,
            created_at=iso_or_empty(c.created_at),
        )


class ServiceItem(BaseModel):
    id: str
    category_id: str
    category_name: str | None
    name: str
    price_per_1000_cents: int
    price_per_1000_display: str
    processing_time_hours: int
    description: str | None
    image_url: str | None
    created_at: str

    @classmethod
    def from_domain(cls, s: Service) -> "ServiceItem":
        return cls(
            id=s.id,
            category_id=s.category_id,
            category_name=s.category_name,
            name=s.name,
            price_per_1000_cents=s.price,
            price_per_1000_display=cents_to_display(s.price),
            processing_time_hours=s.processing_time_hours,
            description=s.description,
            image_url=s.image_url,
            created_at=iso_or_empty(s.created_at),
        )


class DeleteCategoryResponse(BaseModel):
    category_id: str
    deleted_services: int
