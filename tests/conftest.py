import os

# in-memory database for every test; must be set before app modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("RUNNING_IN_DOCKER", "1")

from decimal import Decimal

import pytest
from jose import jwt

from app.config.settings import ALGORITHM, SECRET_KEY
from app.database.db_connection import Base, SessionLocal, engine
from app.database.init_db import import_models

import_models()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin_headers():
    token = jwt.encode({"sub": "staff-1", "role": "owner"}, SECRET_KEY, algorithm=ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def menu(db):
    """Wings (6 pcs, 3-pc slots, up to 2 flavors), a rice meal, a bundle and four flavors."""
    from app.api.catalog.models.model_product import ProductType
    from app.api.catalog.models.model_flavor import FlavorType
    from app.api.catalog.repositories.repo_catalog import FlavorRepository, ProductRepository

    products = ProductRepository(db)
    flavors = FlavorRepository(db)

    rice = products.create_product(name="Rice Meal", sku="RM-1", price=Decimal("150"), category="meals")
    wings = products.create_product(
        name="6 pcs Wings", sku="W-6", price=Decimal("200"), category="wings",
        product_type=ProductType.FLAVORED,
    )
    products.set_flavor_rule(wings, total_units=6, units_per_flavor=3, min_flavors=1, max_flavors=2)
    bundle = products.create_product(
        name="Barkada Bundle", sku="B-1", price=Decimal("599"), category="bundles",
        product_type=ProductType.BUNDLE,
    )
    component = products.add_bundle_component(
        bundle, component_product_id=wings.id, total_units=6, units_per_flavor=3,
        has_flavor_selection=True, flavor_category="wings",
    )
    products.add_bundle_component(bundle, component_product_id=rice.id, has_flavor_selection=False, sort_order=1)

    buffalo = flavors.create_flavor(name="Buffalo", surcharge=Decimal("0"))
    garlic = flavors.create_flavor(name="Garlic Parmesan", surcharge=Decimal("0"))
    truffle = flavors.create_flavor(name="Truffle", surcharge=Decimal("40"), flavor_type=FlavorType.SPECIAL)
    gone = flavors.create_flavor(name="Mango Habanero", surcharge=Decimal("0"), is_available=False)
    db.commit()

    return {
        "rice": rice.id,
        "wings": wings.id,
        "bundle": bundle.id,
        "wings_component": component.id,
        "buffalo": buffalo.id,
        "garlic": garlic.id,
        "truffle": truffle.id,
        "gone": gone.id,
    }
