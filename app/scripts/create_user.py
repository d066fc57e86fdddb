"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m app.scripts.create_user admin@school.test your-secure-password "Site Admin" admin
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.permissions import UserRole, role_id_for
from app.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models.user import User
from app.scripts.seed import seed_roles


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user account.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.TEACHER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args()

    email = args.email.strip()
    name = args.name.strip()
    if not email or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        seed_roles(db)
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            name=name,
            email=email,
            password=hash_password(args.password),
            role_id=role_id_for(args.role),
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
