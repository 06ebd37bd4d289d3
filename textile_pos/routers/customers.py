from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from textile_pos.core.errors import CustomerNotFoundError
from textile_pos.dependencies import get_db, require_login
from textile_pos.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from textile_pos.schemas.sale import SaleRead
from textile_pos.services import customer_service, sales_service

router = APIRouter(prefix="/customers", tags=["Customers"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[CustomerRead])
def list_customers(
    query: Optional[str] = Query(None, description="Name, phone or email"),
    db: Session = Depends(get_db),
):
    return customer_service.list_customers(db, query=query)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        return customer_service.get_customer(db, customer_id)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{customer_id}/sales", response_model=List[SaleRead])
def customer_sales(customer_id: int, db: Session = Depends(get_db)):
    try:
        customer_service.get_customer(db, customer_id)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return sales_service.list_sales(db, customer_id=customer_id)


@router.post("", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    customer = customer_service.add_customer(db, payload.model_dump())
    db.commit()
    db.refresh(customer)
    return customer


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    try:
        customer = customer_service.update_customer(
            db, customer_id, payload.model_dump(exclude_unset=True)
        )
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    db.commit()
    db.refresh(customer)
    return customer


__all__ = ["router"]
