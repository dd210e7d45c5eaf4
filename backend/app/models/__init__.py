from app.models.brand import Brand

__all__ = [
    "Brand",
]
