from sqlalchemy import Column, Integer, ForeignKey, String, UniqueConstraint

from storefront.data.database import Base


class FavoriteModel(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    article_number = Column(
        String,
        ForeignKey("products.article_number", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("user_id", "article_number", name="u_user_favorite"),)
