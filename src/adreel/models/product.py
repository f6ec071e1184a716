"""Upstream product description used to write ad copy."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_FEATURES = ["High quality", "Great value", "Perfect choice"]


class Product(BaseModel):
    """Product facts supplied by the page-scraping collaborator."""

    title: str = Field(default="Amazing Product", description="Product name")
    description: str = Field(
        default="A fantastic product that will enhance your life",
        description="Marketing description"
    )
    price: str = Field(default="Contact for pricing", description="Display price")
    key_features: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FEATURES),
        description="Selling points"
    )
    brand: str = Field(default="Premium Brand", description="Brand name")
    category: str = Field(default="Product", description="Product category")
    url: Optional[str] = Field(None, description="Source page")

    @field_validator("title", "description", "price", "brand", "category", mode="before")
    @classmethod
    def _default_blank(cls, value, info):
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value.strip() if isinstance(value, str) else value

    @field_validator("key_features", mode="before")
    @classmethod
    def _listify_features(cls, value):
        if value is None:
            return list(DEFAULT_FEATURES)
        if isinstance(value, str):
            value = [value]
        features = [str(item).strip() for item in value if str(item).strip()]
        return features or list(DEFAULT_FEATURES)
