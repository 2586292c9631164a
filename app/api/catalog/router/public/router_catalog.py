from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.catalog.schemas.schema_catalog import (
    FlavorResponse,
    FlavorRuleResponse,
    ProductResponse,
    StoreStatusResponse,
)
from app.api.catalog.services.service_catalog import CatalogService
from app.api.catalog.services.service_store_hours import StoreHoursService
from app.database.db_connection import get_db
from app.utils.logger import logger

router = APIRouter(
    prefix="/api/catalog",
    tags=["Public - Catalog"],
)

router_store = APIRouter(
    prefix="/api/store",
    tags=["Public - Store"],
)


@router.get("/products", response_model=List[ProductResponse], status_code=status.HTTP_200_OK)
def list_products(db: Session = Depends(get_db)):
    """Active products with their resolved flavor rule."""
    return CatalogService(db).list_products()


@router.get("/products/{product_id}/flavor-rule", response_model=FlavorRuleResponse)
def get_flavor_rule(
    product_id: int = Path(..., description="Product id"),
    db: Session = Depends(get_db),
):
    logger.info(f"[Catalog] Flavor rule - product={product_id}")
    return CatalogService(db).get_flavor_rule(product_id)


@router.get("/flavors", response_model=List[FlavorResponse])
def list_flavors(
    category: str = Query("wings", description="Flavor category"),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_flavors(category)


@router_store.get("/status", response_model=StoreStatusResponse)
def store_status(db: Session = Depends(get_db)):
    """Open/closed from the `store_hours` setting. Missing setting means open."""
    return StoreHoursService(db).status()
