import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.repository import CatalogRepository

logger = logging.getLogger(__name__)

SIZES = ["S", "M", "L", "XL"]

# (name, description, price, original_price, category, colors, featured, rating, reviews)
SAMPLE_PRODUCTS = [
    ("Linen Kurta", "Breathable handloom linen kurta", "1299.00", "1599.00", "men", ["white", "beige"], True, 4.7, 128),
    ("Oxford Shirt", "Classic button-down oxford shirt", "999.00", None, "men", ["blue", "white"], True, 4.5, 96),
    ("Slim Chinos", "Stretch cotton slim-fit chinos", "1499.00", "1799.00", "men", ["khaki", "navy"], False, 4.3, 54),
    ("Denim Jacket", "Washed denim trucker jacket", "2499.00", None, "men", ["blue"], True, 4.6, 77),
    ("Graphic Tee", "Soft-wash cotton graphic t-shirt", "499.00", "699.00", "men", ["black", "white", "red"], False, 4.2, 210),
    ("Anarkali Dress", "Flared cotton anarkali with block print", "1899.00", "2299.00", "women", ["maroon", "green"], True, 4.8, 143),
    ("Wrap Top", "Rayon wrap top with tie waist", "799.00", None, "women", ["pink", "black"], False, 4.4, 61),
    ("Palazzo Pants", "Flowy printed palazzo pants", "899.00", "1099.00", "women", ["blue", "mustard"], True, 4.5, 88),
    ("Silk Dupatta", "Lightweight art-silk dupatta", "649.00", None, "women", ["red", "gold"], False, 4.1, 35),
    ("Kids Hoodie", "Fleece-lined zip hoodie", "899.00", None, "kids", ["grey", "yellow"], False, 4.6, 42),
    ("Kids Joggers", "Cotton jersey joggers", "599.00", "749.00", "kids", ["navy", "olive"], False, 4.3, 29),
    ("Canvas Tote", "Heavy canvas everyday tote bag", "399.00", None, "accessories", ["natural"], False, 4.0, 18),
]


def seed_products(db: Session) -> int:
    """Seed database with sample products. Returns the number of products created."""
    logger.info("Seeding products...")
    repo = CatalogRepository(db)
    created = 0

    for name, description, price, original_price, category, colors, featured, rating, reviews in SAMPLE_PRODUCTS:
        if repo.find_product_by_name(name):
            logger.info(f"Product {name} already exists, skipping")
            continue

        slug = name.lower().replace(" ", "-")
        repo.create_product(
            name=name,
            price=Decimal(price),
            category=category,
            description=description,
            original_price=Decimal(original_price) if original_price else None,
            sizes=list(SIZES),
            colors=colors,
            images=[f"/img/{slug}-1.jpg", f"/img/{slug}-2.jpg"],
            featured=featured,
            rating=rating,
            reviews=reviews,
            tags=[category],
        )
        created += 1

    db.commit()
    logger.info(f"Seeded {created} of {len(SAMPLE_PRODUCTS)} products")
    return created
