#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_size import ProductSizeModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.favorite import FavoriteModel

__all__ = [
    "UserModel",
    "ProductModel",
    "ProductSizeModel",
    "OrderModel",
    "OrderItemModel",
    "FavoriteModel",
]
