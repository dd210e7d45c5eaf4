import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

SUBDOMAIN_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


class BrandCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    url: str = Field(min_length=1, max_length=120)
    email: EmailStr | None = None
    api_token: str | None = None

    @field_validator("url")
    @classmethod
    def _subdomain_only(cls, value: str) -> str:
        # Accept "acme", "acme.reamaze.io" or "https://acme.reamaze.io/" and keep "acme".
        value = value.strip().lower()
        value = re.sub(r"^https?://", "", value).rstrip("/")
        value = value.split(".", 1)[0]
        if not SUBDOMAIN_RE.match(value):
            raise ValueError("url must be the helpdesk subdomain, e.g. 'acme'")
        return value

    @field_validator("api_token")
    @classmethod
    def _blank_token_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class BrandResponse(BaseModel):
    id: int
    name: str
    url: str
    email: str | None
    has_api_token: bool = False
    created_at: datetime

    @classmethod
    def from_brand(cls, brand) -> "BrandResponse":
        return cls(
            id=brand.id,
            name=brand.name,
            url=brand.url,
            email=brand.email,
            has_api_token=bool(brand.api_token),
            created_at=brand.created_at,
        )
