# models.py
from __future__ import annotations
from typing import Optional
from datetime import datetime, UTC
from pydantic import BaseModel, ConfigDict, Field, EmailStr

from utils import ObjectIdStr, OptObjectIdStr


class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserOut(UserBase):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectIdStr = Field(alias="_id")
    created_at: datetime


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(0, ge=0)


class ProductCreate(ProductBase):
    # generated when omitted
    sku: Optional[str] = None
    supplier_id: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = None
    supplier_id: Optional[str] = None


class ProductOut(ProductBase):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectIdStr = Field(alias="_id")
    sku: str
    owner_id: ObjectIdStr
    supplier_id: OptObjectIdStr = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
