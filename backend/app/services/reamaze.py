from dataclasses import dataclass
import enum
from typing import Any

import httpx
from loguru import logger

from app.schemas.reports import DateRange


class ReportMetric(str, enum.Enum):
    channel_summary = "channel_summary"
    tags = "tags"
    staff = "staff"
    response_time = "response_time"
    volume = "volume"


class ReamazeError(Exception):
    """A single brand's report could not be fetched or parsed."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite JSON constant {name}")


@dataclass(frozen=True)
class ReamazeCredentials:
    email: str = ""
    api_token: str = ""


class ReamazeClient:
    """Thin client for the Re:amaze reporting endpoints.

    ``default_credentials`` are used for any brand row that leaves its own
    email or API token blank.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        default_credentials: ReamazeCredentials | None = None,
        domain: str = "reamaze.io",
    ):
        self.http = http
        self.default_credentials = default_credentials or ReamazeCredentials()
        self.domain = domain

    def report_url(self, subdomain: str, metric: ReportMetric) -> str:
        return f"https://{subdomain}.{self.domain}/api/v1/reports/{metric.value}"

    def credentials_for(self, brand) -> ReamazeCredentials:
        return ReamazeCredentials(
            email=brand.email or self.default_credentials.email,
            api_token=brand.api_token or self.default_credentials.api_token,
        )

    async def fetch_report(self, brand, metric: ReportMetric, window: DateRange | None = None) -> dict[str, Any]:
        creds = self.credentials_for(brand)
        if not creds.email or not creds.api_token:
            raise ReamazeError(f"No Re:amaze credentials configured for brand {brand.name!r}")

        url = self.report_url(brand.url, metric)
        params = window.as_params() if window else {}
        logger.debug(f"Fetching {metric.value} for brand {brand.name!r} from {url} {params or ''}")

        try:
            response = await self.http.get(
                url,
                params=params,
                auth=(creds.email, creds.api_token),
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            payload = response.json(parse_constant=_reject_constant)
        except httpx.HTTPStatusError as exc:
            raise ReamazeError(f"Re:amaze returned HTTP {exc.response.status_code} for {metric.value}") from exc
        except httpx.HTTPError as exc:
            raise ReamazeError(f"Request to {url} failed: {exc!s} ({type(exc).__name__})") from exc
        except ValueError as exc:
            raise ReamazeError(f"Re:amaze returned invalid JSON for {metric.value}") from exc

        if not isinstance(payload, dict):
            raise ReamazeError(f"Unexpected {metric.value} payload type: {type(payload).__name__}")
        return payload
