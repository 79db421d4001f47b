# models/catalog.py

from typing import Optional
from pydantic import BaseModel, Field


# -----------------------------------------------------
# Categories
# -----------------------------------------------------
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


# -----------------------------------------------------
# Products
# -----------------------------------------------------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[str] = None
    brand_id: Optional[str] = None
    product_code: Optional[str] = None
    unit: Optional[str] = None
    stock_count: int = Field(0, ge=0)
    is_featured: bool = False
    is_active: bool = True
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[str] = None
    brand_id: Optional[str] = None
    product_code: Optional[str] = None
    unit: Optional[str] = None
    stock_count: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None
    image_url: Optional[str] = None
