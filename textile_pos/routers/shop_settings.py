from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from textile_pos.dependencies import get_db, require_login
from textile_pos.schemas.shop_settings import ShopSettingsBase, ShopSettingsRead
from textile_pos.services.shop_settings_service import get_shop_settings, save_shop_settings

router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(require_login)])


@router.get("", response_model=ShopSettingsRead)
def read_settings(db: Session = Depends(get_db)):
    settings = get_shop_settings(db)
    if settings is None:
        raise HTTPException(status_code=404, detail="Shop settings have not been saved yet.")
    return settings


@router.put("", response_model=ShopSettingsRead)
def write_settings(payload: ShopSettingsBase, db: Session = Depends(get_db)):
    values = payload.model_dump()
    values["gstin"] = values["gstin"].upper()
    settings = save_shop_settings(db, values)
    db.commit()
    db.refresh(settings)
    return settings


__all__ = ["router"]
