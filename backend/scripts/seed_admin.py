#!/usr/bin/env python3
"""
Admin User Seed Script
Creates an admin user for the trust management console.

Usage:
    python -m scripts.seed_admin <email> <username> <password>

Example:
    python -m scripts.seed_admin admin@market.example admin securepassword123
"""
import sys
from uuid import uuid4

from sqlalchemy.orm import Session
from vendor_trust.database import SessionLocal, engine, Base
from vendor_trust.models.db_models import UserDB
from vendor_trust.auth import hash_password


def create_admin_user(email: str, username: str, password: str) -> bool:
    """Create an admin user, or upgrade an existing account with that email."""
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    try:
        existing = db.query(UserDB).filter(
            (UserDB.email == email) | (UserDB.username == username)
        ).first()

        if existing:
            if existing.email != email:
                print(f"Error: Username '{username}' already exists.")
                return False
            if existing.role == "admin":
                print(f"Error: Email '{email}' already exists and is already an admin.")
                return False
            existing.role = "admin"
            db.commit()
            print(f"Upgraded existing user '{email}' to admin role.")
            return True

        db.add(UserDB(
            id=str(uuid4()),
            email=email,
            username=username,
            password_hash=hash_password(password),
            role="admin"
        ))
        db.commit()

        print("Admin user created successfully!")
        print(f"  Email: {email}")
        print(f"  Username: {username}")
        print("  Role: admin")
        return True

    except Exception as e:
        print(f"Error creating admin user: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)

    email, username, password = sys.argv[1], sys.argv[2], sys.argv[3]

    if len(password) < 8:
        print("Error: Password must be at least 8 characters.")
        sys.exit(1)

    if "@" not in email:
        print("Error: Invalid email format.")
        sys.exit(1)

    success = create_admin_user(email, username, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
