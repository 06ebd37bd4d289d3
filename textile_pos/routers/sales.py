from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from textile_pos.config import Settings
from textile_pos.core.errors import SaleNotFoundError
from textile_pos.dependencies import get_app_settings, get_db, require_login
from textile_pos.schemas.sale import SaleRead, SaleShareRead, SaleWhatsAppRequest
from textile_pos.services.checkout import CompletedOrder
from textile_pos.services.receipt_service import build_receipt, build_share_message
from textile_pos.services.sales_service import get_sale_by_invoice, list_sales
from textile_pos.services.shop_settings_service import get_shop_settings
from textile_pos.services.whatsapp_service import build_share_link, normalize_phone, send_whatsapp

router = APIRouter(prefix="/sales", tags=["Sales"], dependencies=[Depends(require_login)])


def _load_order(db: Session, invoice_no: str) -> CompletedOrder:
    try:
        return CompletedOrder.from_sale(get_sale_by_invoice(db, invoice_no))
    except SaleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _share_details(db: Session, order: CompletedOrder, phone: Optional[str], settings: Settings):
    phone = normalize_phone(phone or order.customer_phone)
    if not phone:
        raise HTTPException(status_code=400, detail="Customer mobile number is required.")
    shop = get_shop_settings(db)
    message = build_share_message(
        order,
        shop.shop_name if shop else None,
        currency=settings.CURRENCY_SYMBOL,
    )
    return phone, message


@router.get("", response_model=List[SaleRead])
def sales_ledger(
    customer_id: Optional[int] = Query(None, description="Only this customer's sales"),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return list_sales(db, customer_id=customer_id, limit=limit)


@router.get("/{invoice_no}", response_model=SaleRead)
def get_sale(invoice_no: str, db: Session = Depends(get_db)):
    try:
        return get_sale_by_invoice(db, invoice_no)
    except SaleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{invoice_no}/receipt-data")
def receipt_data(invoice_no: str, db: Session = Depends(get_db)):
    order = _load_order(db, invoice_no)
    return build_receipt(order, get_shop_settings(db))


@router.get("/{invoice_no}/receipt", response_class=HTMLResponse)
def receipt_page(
    invoice_no: str,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    order = _load_order(db, invoice_no)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        "receipt.html",
        {
            "request": request,
            "receipt": build_receipt(order, get_shop_settings(db)),
            "currency": settings.CURRENCY_SYMBOL,
        },
    )


@router.get("/{invoice_no}/share", response_model=SaleShareRead)
def share_receipt(
    invoice_no: str,
    phone: Optional[str] = Query(None, description="Override the customer's number"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    order = _load_order(db, invoice_no)
    phone, message = _share_details(db, order, phone, settings)
    return SaleShareRead(
        invoice_no=order.invoice_no,
        phone=phone,
        message=message,
        link=build_share_link(phone, message),
    )


@router.post("/{invoice_no}/whatsapp")
def send_receipt(
    invoice_no: str,
    payload: SaleWhatsAppRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    order = _load_order(db, invoice_no)
    phone, message = _share_details(db, order, payload.phone, settings)
    try:
        send_whatsapp(message, phone, settings=settings)
    except (RuntimeError, ValueError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"status": "sent", "phone": phone, "invoice_no": order.invoice_no}


__all__ = ["router"]
