from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas, models
from ..deps import get_db, admin_only

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/running-text", response_model=schemas.RunningText)
def get_running_text(db: Session = Depends(get_db)):
    setting = db.get(models.Setting, models.RUNNING_TEXT_KEY)
    return {"text": setting.value if setting and setting.value is not None else ""}


@router.post("/running-text", response_model=schemas.Success)
def set_running_text(
    payload: schemas.RunningText,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """Replace the ticker text shown on the display screens."""
    db.merge(models.Setting(key=models.RUNNING_TEXT_KEY, value=payload.text))
    db.commit()
    return {"success": True}
