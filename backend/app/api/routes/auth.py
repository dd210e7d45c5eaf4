from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordRequestForm
from loguru import logger

from app.core.deps import get_current_admin
from app.core.rate_limit import limiter
from app.core.security import authenticate_admin, create_access_token
from app.schemas.auth import TokenResponse, VerifyResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit("20/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends()):
    if not authenticate_admin(form_data.username, form_data.password):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(f"Failed admin login for {form_data.username!r} from {client_ip}")
        raise HTTPException(status_code=400, detail="Invalid credentials")

    logger.info(f"Admin {form_data.username!r} logged in")
    return TokenResponse(access_token=create_access_token(form_data.username))


@router.get("/verify", response_model=VerifyResponse)
def verify(username: str = Depends(get_current_admin)):
    return VerifyResponse(valid=True, username=username)
