from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductSizeModel(Base):
    __tablename__ = "product_sizes"

    id = Column(Integer, primary_key=True)
    article_number = Column(
        String,
        ForeignKey("products.article_number", ondelete="CASCADE"),
        nullable=False,
    )
    size = Column(String, nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    product = relationship("ProductModel", back_populates="sizes")

    __table_args__ = (
        UniqueConstraint("article_number", "size", name="u_product_size"),
        CheckConstraint("stock >= 0", name="ck_product_size_stock"),
    )
