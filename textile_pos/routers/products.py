from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from textile_pos.core.errors import ProductNotFoundError
from textile_pos.dependencies import get_db, require_login
from textile_pos.schemas.product import (
    ProductBulkCreate,
    ProductCreate,
    ProductImportRequest,
    ProductRead,
    ProductUpdate,
)
from textile_pos.services import product_service
from textile_pos.services.import_service import import_workbook

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[ProductRead])
def list_products(
    query: Optional[str] = Query(None, description="Name, SKU or material"),
    product_type: Optional[str] = Query(None, alias="type", description="Product type, or All"),
    db: Session = Depends(get_db),
):
    return product_service.list_products(db, query=query, product_type=product_type)


@router.get("/low-stock", response_model=List[ProductRead])
def low_stock(db: Session = Depends(get_db)):
    return product_service.low_stock_products(db)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return product_service.get_product(db, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    product = product_service.add_product(db, payload.model_dump())
    db.commit()
    db.refresh(product)
    return product


@router.post("/bulk", response_model=List[ProductRead], status_code=201)
def bulk_create_products(payload: ProductBulkCreate, db: Session = Depends(get_db)):
    products = product_service.bulk_add_products(
        db, [item.model_dump() for item in payload.products]
    )
    db.commit()
    return products


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True)
    try:
        product = product_service.update_product(db, product_id, changes)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    db.commit()
    db.refresh(product)
    return product


@router.post("/import")
def import_products(payload: ProductImportRequest, request: Request):
    try:
        results = import_workbook(
            request.app.state.database,
            payload.path,
            sheet=payload.sheet,
            dry_run=payload.dry_run,
        )
    except (OSError, ValueError, SQLAlchemyError, InvalidFileException) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"results": results, "dry_run": payload.dry_run}


__all__ = ["router"]
