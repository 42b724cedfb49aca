"""Domain models for smm_catalog — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Category:
    id: str
    name: str
    created_at: datetime | None = None
    service_count: int = 0


@dataclass
class Service:
    id: str
    category_id: str
    name: str
    price: int                   # cents per 1000 units (per-mille)
    processing_time_hours: int
    description: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category_name: str | None = None
