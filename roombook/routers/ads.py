import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import schemas, models
from ..deps import get_db, admin_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ads", tags=["ads"])


@router.get("", response_model=List[schemas.AdOut])
def list_active_ads(db: Session = Depends(get_db)):
    """Ads currently in rotation on the display screens."""
    return (
        db.query(models.Ad)
        .filter(models.Ad.active == True)  # noqa: E712
        .order_by(models.Ad.id)
        .all()
    )


@router.post("", response_model=schemas.Created)
def create_ad(
    ad_in: schemas.AdCreate,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    ad = models.Ad(type=ad_in.type, url=ad_in.url, duration=ad_in.duration)
    db.add(ad)
    db.commit()
    db.refresh(ad)
    return {"id": ad.id}


@router.delete("/{ad_id}", response_model=schemas.Success)
def delete_ad(
    ad_id: int,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    ad = db.query(models.Ad).filter(models.Ad.id == ad_id).first()
    if not ad:
        raise HTTPException(status_code=404, detail="Ad not found")
    db.delete(ad)
    db.commit()
    logger.info("Ad %s deleted", ad_id)
    return {"success": True}
