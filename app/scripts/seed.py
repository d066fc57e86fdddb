"""
Seed the fixed roles and the default admin/teacher accounts. Idempotent. Run from project root:
  python -m app.scripts.seed
"""

import logging
import sys

from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.permissions import ROLE_IDS, UserRole
from app.core.security import hash_password
from app.models import Role, User

logger = logging.getLogger(__name__)

# (name, email, password, role) for development logins.
DEFAULT_ACCOUNTS = (
    ("Super Admin", "admin@example.com", "admin123", UserRole.ADMIN),
    ("John Teacher", "teacher@example.com", "teacher123", UserRole.TEACHER),
)


def seed_roles(db: Session) -> int:
    """Insert any missing role rows with their fixed ids; returns how many were added."""
    existing = {role_id for (role_id,) in db.query(Role.id).all()}
    added = 0
    for role, role_id in ROLE_IDS.items():
        if role_id not in existing:
            db.add(Role(id=role_id, name=role.value))
            added += 1
    db.commit()
    return added


def seed_accounts(db: Session) -> int:
    added = 0
    for name, email, password, role in DEFAULT_ACCOUNTS:
        if db.query(User).filter(User.email == email).first() is not None:
            continue
        db.add(
            User(
                name=name,
                email=email,
                password=hash_password(password),
                role_id=ROLE_IDS[role],
            )
        )
        added += 1
    db.commit()
    return added


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    db = SessionLocal()
    try:
        roles_added = seed_roles(db)
        accounts_added = seed_accounts(db)
        logger.info("Seeding completed: roles_added=%s accounts_added=%s", roles_added, accounts_added)
        return 0
    except Exception as e:
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
