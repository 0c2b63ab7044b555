"""
Typed structure of a generated store.

The language model is asked for JSON in exactly this shape; anything that
does not validate here is treated as a malformed reply.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class FontStyle(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    PLAYFUL = "playful"


class LayoutStyle(str, Enum):
    MINIMAL = "minimal"
    BOLD = "bold"
    ELEGANT = "elegant"


class StoreModel(BaseModel):
    """Base for camelCase wire models"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProductImages(StoreModel):
    """URLs or data URIs for the product shots"""
    front: Optional[str] = None
    back: Optional[str] = None
    side: Optional[str] = None


class Product(StoreModel):
    id: StrictInt
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0, strict=True, allow_inf_nan=False)
    images: ProductImages = Field(default_factory=ProductImages)


class Customization(StoreModel):
    primary_color: str = Field(alias="primaryColor", pattern=HEX_COLOR_PATTERN)
    accent_color: str = Field(alias="accentColor", pattern=HEX_COLOR_PATTERN)
    font: FontStyle
    layout: LayoutStyle
    payments_enabled: Optional[bool] = Field(default=None, alias="paymentsEnabled")


class GenerationResult(StoreModel):
    store_name: str = Field(alias="storeName", min_length=1)
    products: List[Product] = Field(min_length=1)
    customization: Customization
    suggestions: List[str] = Field(default_factory=list)
