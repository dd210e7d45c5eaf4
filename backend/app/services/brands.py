from sqlalchemy.orm import Session

from app.models.brand import Brand
from app.schemas.brand import BrandCreate


def list_brands(db: Session) -> list[Brand]:
    return db.query(Brand).order_by(Brand.id).all()


def get_brand(db: Session, brand_id: int) -> Brand | None:
    return db.query(Brand).filter(Brand.id == brand_id).first()


def create_brand(db: Session, payload: BrandCreate) -> Brand:
    brand = Brand(**payload.model_dump())
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


def delete_brand(db: Session, brand_id: int) -> bool:
    brand = get_brand(db, brand_id)
    if not brand:
        return False
    db.delete(brand)
    db.commit()
    return True
