"""Initialize the database and seed the super-admin account."""

from typing import Optional

from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import Role, User
from repositories.user_repository import UserRepository


def seed_super_admin(db: Session) -> Optional[User]:
    """Create the super-admin from ADMIN_EMAIL/ADMIN_PASSWORD if missing.

    Returns:
        The created user, or None when the account already exists.
    """
    user_repo = UserRepository(db)
    if user_repo.get_by_email(settings.ADMIN_EMAIL) is not None:
        return None

    admin = User(
        email=settings.ADMIN_EMAIL.strip().lower(),
        display_name="Administrator",
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        role=Role.SUPER_ADMIN,
    )
    return user_repo.create(admin)


def init_db() -> None:
    """Initialize the database with default data."""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin = seed_super_admin(db)
        if admin is not None:
            print("[OK] Super-admin user created")
            print(f"  Email: {admin.email}")
            print("  Password: (from ADMIN_PASSWORD in .env)")
            print("  IMPORTANT: Change this password in production!")

        print("\n[OK] Database initialization complete!")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
