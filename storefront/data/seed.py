# storefront/data/seed.py
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel, ProductSizeModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {
        "article_number": "SNK-001",
        "name": "Runner sneakers",
        "price": 349900,
        "discount": 10,
        "sizes": {"41": 5, "42": 8, "43": 3},
    },
    {
        "article_number": "TEE-001",
        "name": "Basic t-shirt",
        "price": 7900,
        "discount": 0,
        "sizes": {"S": 20, "M": 25, "L": 10},
    },
    {
        "article_number": "HOOD-001",
        "name": "Zip hoodie",
        "price": 19900,
        "discount": 15,
        "sizes": {"M": 4, "L": 0},
    },
]


def seed(db=None) -> int:
    """Wrzuca przykladowy katalog; tylko gdy tabela produktow jest pusta."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        if db.query(ProductModel).first():
            return 0

        for data in DEMO_PRODUCTS:
            product = ProductModel(
                article_number=data["article_number"],
                name=data["name"],
                price=data["price"],
                discount=data["discount"],
                image_urls=[],
                is_active=True,
            )
            product.sizes = [
                ProductSizeModel(size=size, stock=stock) for size, stock in data["sizes"].items()
            ]
            db.add(product)

        db.commit()
        logger.info(f"Seeded {len(DEMO_PRODUCTS)} products")
        return len(DEMO_PRODUCTS)
    finally:
        if own_session:
            db.close()


def main() -> None:
    Base.metadata.create_all(bind=engine)
    seed()


if __name__ == "__main__":
    main()
