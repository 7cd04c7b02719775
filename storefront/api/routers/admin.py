# storefront/api/routers/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import require_admin, to_http
from storefront.data.database import get_db
from storefront.domain.errors import InvalidRequest, ShopError
from storefront.domain.order_state import OrderStatus
from storefront.domain.schemas import (
    MessageOut,
    OrderOut,
    ProductSizeOut,
    ShippingUpdate,
    StatusChangeIn,
    StockIn,
)
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus[value.strip().upper()]
    except KeyError:
        raise InvalidRequest(f"Unknown order status {value}")


@router.get("/orders", response_model=List[OrderOut])
def list_orders(status: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        return OrderService(db).list_all_orders(_parse_status(status) if status else None)
    except ShopError as e:
        raise to_http(e)


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    try:
        return OrderService(db).get_order(order_id)
    except ShopError as e:
        raise to_http(e)


@router.post("/orders/{order_id}/status", response_model=OrderOut)
def change_status(order_id: int, payload: StatusChangeIn, db: Session = Depends(get_db)):
    try:
        return OrderService(db).change_status(order_id, _parse_status(payload.status))
    except ShopError as e:
        raise to_http(e)


@router.put("/orders/{order_id}", response_model=OrderOut)
def update_shipping(order_id: int, payload: ShippingUpdate, db: Session = Depends(get_db)):
    try:
        return OrderService(db).update_shipping(
            order_id,
            delivery_address=payload.delivery_address,
            telephone=payload.telephone,
            payment_method=payload.payment_method,
        )
    except ShopError as e:
        raise to_http(e)


@router.delete("/orders/{order_id}/items/{line_id}", response_model=MessageOut)
def remove_line(order_id: int, line_id: int, db: Session = Depends(get_db)):
    try:
        result = OrderService(db).remove_line(order_id, line_id)
    except ShopError as e:
        raise to_http(e)

    if result["deleted"]:
        return {"message": f"Line removed, order {order_id} deleted"}
    return {"message": "Line removed"}


@router.put("/products/{article_number}/sizes/{size}", response_model=ProductSizeOut)
def set_stock(article_number: str, size: str, payload: StockIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).set_stock(article_number, size, payload.stock)
    except ShopError as e:
        raise to_http(e)
