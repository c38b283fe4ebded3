import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from .. import schemas, models
from ..config import Settings, get_settings
from ..deps import get_db, authenticate_user, create_access_token, get_current_user
from ..rate_limit import limiter, LOGIN_RATE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=schemas.LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    credentials: schemas.LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Authenticate a user.

    Returns the user's id, username and role, plus a JWT access token for
    routes that require authentication.

    Raises
    ------
    HTTPException
        - 401 if credentials are invalid.
    """
    user = authenticate_user(db, credentials.username, credentials.password)
    if not user:
        logger.info("Failed login for %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    token = create_access_token({"sub": user.username, "role": user.role.value}, settings)
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "access_token": token,
        "token_type": "bearer",
    }


@router.get("/me", response_model=schemas.UserOut)
def read_current_user(current_user: models.User = Depends(get_current_user)):
    """
    Get the currently authenticated user.

    Returns the profile of the user associated with the provided Bearer token.
    """
    return current_user
