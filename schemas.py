"""
Request schemas for the E-commerce backend

Documents are stored in the products, comments and orders collections with
camelCase field names. Request bodies keep every field optional: presence is
decided by the validation layer so that missing fields answer with the shop's
own messages instead of a generic 422.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    stock: Optional[int] = None
    specifications: Optional[Dict[str, Any]] = None
    images: Optional[List[str]] = None
    mainImageIndex: Optional[int] = None


class ProductUpdate(ProductCreate):
    pass


class ReviewCreate(BaseModel):
    username: Optional[str] = None
    comment: Optional[str] = None
    star: Optional[Union[int, float]] = None
    verified: Optional[bool] = None


class OrderCreate(BaseModel):
    userId: Any = None
    items: Optional[List[Any]] = None
    shippingAddress: Any = None
    paymentMethod: Any = None
    paymentDetails: Any = None
    total: Optional[float] = None
    status: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None
