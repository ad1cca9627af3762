"""
Create the default administrator account.

Safe to run repeatedly: an existing admin email is left untouched.

Usage:
    # Locally (uses DATABASE_URL / .env)
    python seed_admin.py

    # With custom credentials
    ADMIN_EMAIL=ops@example.com ADMIN_PASSWORD=... python seed_admin.py
"""
import os
import sys

from sqlalchemy.orm import Session

from meunps.auth import get_password_hash
from meunps.database import Base, SessionLocal, engine
from meunps.models import User, UserAdmin, UserAffiliate, UserProfile
from meunps.schemas.blobs import default_permissions
from meunps.utils import generate_affiliate_code

DEFAULT_ADMIN_EMAIL = "admin@meunps.com"
DEFAULT_ADMIN_NAME = "Administrador"
DEFAULT_ADMIN_PASSWORD = "admin123"


def seed_admin(db: Session, email: str, password: str, name: str = DEFAULT_ADMIN_NAME) -> tuple[User, bool]:
    """Return (user, created). Creates the user with profile, admin grant and affiliate record."""
    existing = db.query(User).filter(User.email == email).first()
    if existing is not None:
        return existing, False

    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role="admin",
    )
    db.add(user)
    db.flush()

    db.add(UserProfile(user_id=user.id, name=name, email=email))
    db.add(UserAdmin(user_id=user.id, permissions=default_permissions()))
    db.add(UserAffiliate(user_id=user.id, affiliate_code=generate_affiliate_code()))
    db.commit()
    db.refresh(user)
    return user, True


def main() -> int:
    email = os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    password = os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user, created = seed_admin(db, email, password)
    finally:
        db.close()

    if created:
        print(f"✅ Admin user created: {email} ({user.id})")
        if password == DEFAULT_ADMIN_PASSWORD:
            print("⚠️  Using the default password; change it after the first login.")
    else:
        print(f"ℹ️  Admin user already exists: {email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
