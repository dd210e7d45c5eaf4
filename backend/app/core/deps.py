from datetime import date
from typing import AsyncIterator

import httpx
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import decode_token
from app.schemas.reports import DateRange
from app.services.brands import list_brands
from app.services.reamaze import ReamazeClient, ReamazeCredentials
from app.services.reports import ReportAggregator

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_current_admin(token: str = Depends(oauth2_scheme)) -> str:
    # A missing token is rejected with 401 by oauth2_scheme; a bad one is 403.
    invalid_token = HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")
    try:
        payload = decode_token(token)
    except JWTError:
        raise invalid_token

    username = payload.get("sub")
    if payload.get("typ") != "access" or not username:
        raise invalid_token
    if username != get_settings().ADMIN_USERNAME:
        raise invalid_token
    return username


def get_reamaze_credentials() -> ReamazeCredentials:
    settings = get_settings()
    return ReamazeCredentials(email=settings.REAMAZE_EMAIL, api_token=settings.REAMAZE_API_TOKEN)


async def get_report_aggregator(
    db: Session = Depends(get_db),
    credentials: ReamazeCredentials = Depends(get_reamaze_credentials),
) -> AsyncIterator[ReportAggregator]:
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.REAMAZE_TIMEOUT_SECONDS) as http:
        client = ReamazeClient(http, default_credentials=credentials, domain=settings.REAMAZE_DOMAIN)
        yield ReportAggregator(client, lambda: list_brands(db))


def get_date_range(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
) -> DateRange:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return DateRange(start_date=start_date, end_date=end_date)
