import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import schemas, models
from ..deps import get_db, get_password_hash, get_user_by_username, admin_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.UserOut])
def list_users(
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    List all user accounts.

    Only ``id``, ``username`` and ``role`` are returned; password hashes
    never leave the database.
    """
    return db.query(models.User).order_by(models.User.id).all()


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=schemas.Created)
def create_user(
    user_in: schemas.UserCreate,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Create a user account with a hashed password.

    Raises
    ------
    HTTPException
        - 400 if a field is missing or the role is unknown.
        - 409 if the username already exists.
    """
    if get_user_by_username(db, user_in.username):
        raise HTTPException(status_code=409, detail="Username already exists")

    user = models.User(
        username=user_in.username,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent insert of the same username
        db.rollback()
        raise HTTPException(status_code=409, detail="Username already exists")
    db.refresh(user)
    logger.info("User %r created with role %s", user.username, user.role.value)
    return {"id": user.id}


@router.delete("/{user_id}", response_model=schemas.Success)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Delete a user account.

    The built-in ``admin`` and ``superadmin`` accounts are protected by
    username, whatever role they hold.

    Raises
    ------
    HTTPException
        - 403 for a protected account.
        - 404 if the user does not exist.
    """
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.username in models.PROTECTED_USERNAMES:
        raise HTTPException(status_code=403, detail="Cannot delete the main admin users")

    db.delete(user)
    db.commit()
    logger.info("User %r deleted", user.username)
    return {"success": True}
