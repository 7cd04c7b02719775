from sqlalchemy import Column, Integer, String, Text, Boolean, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    article_number = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Integer, nullable=False)  # grosze / minor units
    discount = Column(Integer, nullable=False, default=0)  # procent
    description = Column(Text, nullable=True)
    image_urls = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    sizes = relationship(
        "ProductSizeModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSizeModel.size",
    )
