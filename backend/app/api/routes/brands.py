from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_admin, get_date_range, get_report_aggregator
from app.schemas.brand import BrandCreate, BrandResponse
from app.schemas.reports import DateRange
from app.services.brands import create_brand, delete_brand, get_brand, list_brands
from app.services.reamaze import ReamazeError, ReportMetric
from app.services.reports import ReportAggregator

router = APIRouter(prefix="/brands", tags=["brands"])


@router.get("", response_model=list[BrandResponse])
def list_configured_brands(db: Session = Depends(get_db), _: str = Depends(get_current_admin)):
    return [BrandResponse.from_brand(b) for b in list_brands(db)]


@router.post("", response_model=BrandResponse)
def add_brand(payload: BrandCreate, db: Session = Depends(get_db), _: str = Depends(get_current_admin)):
    brand = create_brand(db, payload)
    logger.info(f"Added brand {brand.id} ({brand.name!r}, {brand.url})")
    return BrandResponse.from_brand(brand)


@router.delete("/{brand_id}")
def remove_brand(brand_id: int, db: Session = Depends(get_db), _: str = Depends(get_current_admin)):
    if not delete_brand(db, brand_id):
        raise HTTPException(status_code=404, detail="Brand not found")
    logger.info(f"Removed brand {brand_id}")
    return {"status": "deleted", "id": brand_id}


@router.get("/{brand_id}/reports/{metric}")
async def brand_report(
    brand_id: int,
    metric: ReportMetric,
    _: str = Depends(get_current_admin),
    window: DateRange = Depends(get_date_range),
    db: Session = Depends(get_db),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    brand = get_brand(db, brand_id)
    if not brand:
        raise HTTPException(status_code=404, detail="Brand not found")

    try:
        return await aggregator.brand_report(brand, metric, window)
    except ReamazeError as exc:
        logger.warning(f"{metric.value} report failed for brand {brand.id}: {exc}")
        raise HTTPException(status_code=502, detail=str(exc))
