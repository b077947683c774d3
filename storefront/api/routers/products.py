# storefront/api/routers/products.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import ProductCreate, ProductRead, StockIn, InventoryOut
from storefront.services.product_service import ProductService
from storefront.services.stock_ledger import StockLedger

router = APIRouter(tags=["products"])


@router.post("/products", response_model=ProductRead, status_code=201)
def add_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).add_product(payload)


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: UUID, db: Session = Depends(get_db)):
    return ProductService(db).get_product(product_id)


@router.post("/products/{product_id}/publish", response_model=ProductRead)
def publish_product(product_id: UUID, db: Session = Depends(get_db)):
    return ProductService(db).publish_product(product_id)


@router.post("/inventories/{inventory_id}/stock", response_model=InventoryOut)
def add_stock(inventory_id: UUID, payload: StockIn, db: Session = Depends(get_db)):
    """Admin: adds units to an inventory."""
    return StockLedger(db).add_stock(inventory_id, payload.stock)
