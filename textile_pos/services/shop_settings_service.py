from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from textile_pos.models.shop_settings import ShopSettings


def get_shop_settings(db: Session) -> Optional[ShopSettings]:
    return db.execute(select(ShopSettings).order_by(ShopSettings.id).limit(1)).scalars().first()


def save_shop_settings(db: Session, values: dict) -> ShopSettings:
    """Create the singleton settings row on first save, update it afterwards."""
    settings = get_shop_settings(db)
    if settings is None:
        settings = ShopSettings(**values)
        db.add(settings)
    else:
        for key, value in values.items():
            setattr(settings, key, value)
    db.flush()
    return settings


__all__ = ["get_shop_settings", "save_shop_settings"]
