from app.api.routes import analytics, auth, brands, reports

__all__ = [
    "auth",
    "brands",
    "reports",
    "analytics",
]
