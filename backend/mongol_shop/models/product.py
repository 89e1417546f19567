from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ProductStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


class Dimensions(BaseModel):
    length: float
    width: float
    height: float
    unit: str  # "cm" or "in"


class ProductAttributes(BaseModel):
    color: Optional[str] = None
    size: Optional[str] = None
    material: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None


class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    category: str
    subcategory: Optional[str] = None
    price: float = Field(..., ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    currency: str = "USD"
    inventory: int = Field(0, ge=0)
    sku: Optional[str] = None
    track_inventory: bool = True
    images: List[str] = Field(default_factory=list)
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    attributes: Optional[ProductAttributes] = None
    tags: Optional[List[str]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ProductUpdate(BaseModel):
    """Partial update. Only fields the caller actually sends are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    inventory: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = None
    track_inventory: Optional[bool] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    attributes: Optional[ProductAttributes] = None
    tags: Optional[List[str]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    status: Optional[str] = None


class ProductCreated(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    id: str
    seller_id: str
    title: str
    description: str
    category: str
    subcategory: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    currency: str
    inventory: int
    sku: Optional[str] = None
    track_inventory: bool
    images: List[str] = Field(default_factory=list)
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    attributes: Optional[ProductAttributes] = None
    status: str
    featured: bool
    tags: Optional[List[str]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    rating: float
    review_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    class Config:
        from_attributes = True
