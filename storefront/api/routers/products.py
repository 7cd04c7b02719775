from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import to_http
from storefront.data.database import get_db
from storefront.domain.errors import ShopError
from storefront.domain.schemas import ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return ProductService(db).list_products()


@router.get("/{article_number}", response_model=ProductOut)
def get_product(article_number: str, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(article_number)
    except ShopError as e:
        raise to_http(e)
