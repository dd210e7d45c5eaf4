import os
import sys

from app.core.database import Base, SessionLocal, engine
from app.core.security import get_password_hash
from app.models.brand import Brand


def admin_password_hash_line(password: str) -> str:
    return f"ADMIN_PASSWORD_HASH={get_password_hash(password)}"


def seed_brand(name: str, url: str) -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(Brand).filter(Brand.url == url).first()
        if existing:
            print(f"Brand already exists: {url}")
            return
        db.add(Brand(name=name, url=url))
        db.commit()
        print(f"Created brand {name} ({url})")
    finally:
        db.close()


if __name__ == "__main__":
    # Do not hardcode credentials in the repo. Use env vars for local bootstrap.
    admin_password = os.getenv("BOOTSTRAP_ADMIN_PASSWORD")
    brand_name = os.getenv("BOOTSTRAP_BRAND_NAME")
    brand_url = os.getenv("BOOTSTRAP_BRAND_URL")

    if not admin_password and not brand_url:
        print(
            "Bootstrap skipped. Set BOOTSTRAP_ADMIN_PASSWORD to print an admin password hash "
            "and/or BOOTSTRAP_BRAND_URL (and BOOTSTRAP_BRAND_NAME) to seed a brand."
        )
        sys.exit(0)

    if admin_password:
        print(admin_password_hash_line(admin_password))
    if brand_url:
        seed_brand(brand_name or brand_url, brand_url)
