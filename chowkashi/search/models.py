from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..geo.models import Coordinates
from .config import DEFAULT_SEARCH_CONFIG


class SortKey(str, Enum):
    rating = "rating"
    distance = "distance"
    review_count = "reviewCount"
    newest = "newest"


class BusinessListing(BaseModel):
    id: str
    name: str
    category: str = ""
    subcategory: list[str] = Field(default_factory=list)
    description: str = ""
    address: str = ""
    area: str = ""
    city: str = ""
    postal_code: str | None = None
    map_link: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    price_range_min: float | None = None
    price_range_max: float | None = None
    price_unit: str | None = None
    availability_days: list[str] = Field(default_factory=list)
    availability_start_time: str | None = None
    availability_end_time: str | None = None
    is_hidden_gem: bool = False
    is_must_visit: bool = False
    rating: float = 0.0
    review_count: int = 0
    created_at: datetime | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    contact_phone: str | None = None

    # Read-time annotation, never persisted
    distance_km: float | None = None
    distance_label: str | None = None
    distance_is_precise: bool | None = None


class FilterSet(BaseModel):
    distance_km: float = Field(default=DEFAULT_SEARCH_CONFIG.default_radius_km, gt=0.0)
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    price_tier: int = Field(default=3, ge=1, le=3)
    open_now: bool = False
    hidden_gem_only: bool = False
    must_visit_only: bool = False
    category: str = "all"
    subcategory: str = ""
    sort_by: str = SortKey.rating.value


class GeolocationErrorCode(str, Enum):
    permission_denied = "permission_denied"
    position_unavailable = "position_unavailable"
    timeout = "timeout"
    unsupported = "unsupported"


class DeviceReading(BaseModel):
    """What the client's geolocation API reported: a position or an error."""

    coordinates: Coordinates | None = None
    error: GeolocationErrorCode | None = None


class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=500)
    filters: FilterSet = Field(default_factory=FilterSet)
    postal_code: str = ""
    location_text: str | None = Field(
        default=None, description='Free-text location, or "near me" for the device position'
    )
    user_location: Coordinates | None = None
    device: DeviceReading | None = None
    enhance: bool = False
    use_location_search: bool = False
    limit: int = Field(default=50, ge=1, le=100)


class SearchResponse(BaseModel):
    results: list[BusinessListing]
    total_candidates: int
    query: str = ""
    category: str = "all"
    user_location: Coordinates | None = None
    location_label: str | None = None
    notice: str | None = None
    generation: int = 0
    superseded: bool = False


class PostalCodeSearchRequest(BaseModel):
    postal_code: str = ""
    clear: bool = Field(default=False, description="Drop the postal-code filter and search everything")
    filters: FilterSet = Field(default_factory=FilterSet)
    user_location: Coordinates | None = None


class EnhanceRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    near_me: bool = True
    device: DeviceReading | None = None


class EnhanceResponse(BaseModel):
    original: str
    enhanced: str


class ResolveLocationRequest(BaseModel):
    text: str | None = None
    device: DeviceReading | None = None


class ResolveLocationResponse(BaseModel):
    coordinates: Coordinates | None
    label: str | None = None
    notice: str | None = None
    cache_cleared: bool = False
