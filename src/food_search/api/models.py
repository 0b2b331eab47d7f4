"""Pydantic models for the food search API."""

from pydantic import BaseModel, Field


class FoodSearchRequest(BaseModel):
    """Food search request payload."""

    query: str = Field(min_length=2, max_length=100)
    limit: int | None = Field(default=None, ge=1, le=50)
    include_recent: bool = True
