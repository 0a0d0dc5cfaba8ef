from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from pos_console import crud, models, security
from pos_console.auth import SESSION_COOKIE, get_current_user
from pos_console.config import get_settings
from pos_console.dependencies import get_db
from pos_console.logging_config import get_logger
from pos_console.schemas import LoginRequest, Message, StaffRead

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger("api.auth")


@router.post("/login", response_model=StaffRead)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)) -> StaffRead:
    user = crud.authenticate_user(db, payload.email, payload.password)
    if not user:
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE,
        security.sign_session(user.id, settings.secret_key),
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
    )
    logger.info("User %s signed in", user.email)
    return StaffRead.model_validate(user)


@router.post("/logout", response_model=Message)
def logout(response: Response) -> Message:
    response.delete_cookie(SESSION_COOKIE)
    return Message(message="Signed out")


@router.get("/me", response_model=StaffRead)
def me(user: models.User = Depends(get_current_user)) -> StaffRead:
    return StaffRead.model_validate(user)
