# storefront/domain/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Na zewnatrz camelCase (articleNumber), w kodzie snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- koszyk ----------

class CartItemIn(ApiModel):
    """Dodanie produktu do koszyka."""

    article_number: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Ilosc (musi byc > 0)")


class CartItemUpdate(ApiModel):
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class SessionItemUpdate(ApiModel):
    """Zmiana pozycji w koszyku goscia (pozycja identyfikowana przez article + size)."""

    article_number: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    new_size: Optional[str] = None


class LineItemOut(ApiModel):
    id: Optional[int] = None
    article_number: str
    size: str
    quantity: int


class CartLineOut(LineItemOut):
    name: Optional[str] = None
    price: int = 0
    discount: int = 0
    image_urls: List[str] = []


class CartOut(ApiModel):
    order_id: Optional[int] = None
    items: List[CartLineOut]
    total: int
    last_updated: Optional[datetime] = None


class CountOut(ApiModel):
    count: int


class MessageOut(ApiModel):
    message: str


# ---------- ulubione ----------

class FavoriteIn(ApiModel):
    article_number: str = Field(..., min_length=1)


class FavoritesOut(ApiModel):
    items: List[str]
    count: int


# ---------- zamowienia ----------

class CheckoutIn(ApiModel):
    delivery_address: str = Field(..., min_length=1)
    telephone: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1)
    # wymagane tylko dla gosci
    email: Optional[str] = None
    name: Optional[str] = None
    captcha_token: Optional[str] = None


class CheckoutOut(ApiModel):
    order_id: int
    message: str


class ShippingUpdate(ApiModel):
    delivery_address: Optional[str] = None
    telephone: Optional[str] = None
    payment_method: Optional[str] = None


class StatusChangeIn(ApiModel):
    status: str = Field(..., description="CONFIRMED, FULFILLED albo CANCELLED")


class OrderOut(ApiModel):
    order_id: int
    user_id: Optional[int] = None
    status: str
    created_at: datetime
    last_updated: Optional[datetime] = None
    delivery_address: Optional[str] = None
    telephone: Optional[str] = None
    payment_method: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    items: List[LineItemOut] = []


# ---------- katalog ----------

class ProductSizeOut(ApiModel):
    size: str
    stock: int


class ProductOut(ApiModel):
    article_number: str
    name: str
    price: int
    discount: int
    description: Optional[str] = None
    image_urls: List[str] = []
    sizes: List[ProductSizeOut] = []


class StockIn(ApiModel):
    stock: int = Field(..., ge=0)


# ---------- uzytkownicy ----------

class UserCreate(ApiModel):
    """Rejestracja uzytkownika (tozsamosc nadaje zewnetrzny dostawca)."""

    id: int = Field(..., gt=0, description="ID uzytkownika (musi byc > 0)")
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None


class UserRead(ApiModel):
    id: int
    name: str
    email: Optional[str] = None
