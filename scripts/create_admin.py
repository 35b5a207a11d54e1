#!/usr/bin/env python3
"""Create the first admin account.

Usage:
    ADMIN_EMAIL=admin@pizzaorder.com ADMIN_PASSWORD=... python scripts/create_admin.py
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pizzeria.database import SessionLocal
from pizzeria.models.enums import UserRole
from pizzeria.services.auth import create_user, get_user_by_email


def create_admin():
    email = os.getenv("ADMIN_EMAIL", "admin@pizzaorder.com")
    password = os.getenv("ADMIN_PASSWORD")
    if not password or len(password) < 8:
        print("ADMIN_PASSWORD must be set to at least 8 characters")
        sys.exit(1)

    session = SessionLocal()
    try:
        existing = get_user_by_email(session, email)
        if existing:
            if existing.role != UserRole.ADMIN:
                existing.role = UserRole.ADMIN
                session.commit()
                print(f"Promoted existing user {email} to admin")
            else:
                print("Admin user already exists")
            return

        admin = create_user(
            session,
            email,
            password,
            os.getenv("ADMIN_NAME", "Admin User"),
            role=UserRole.ADMIN,
        )
        admin.is_email_verified = True
        admin.email_verification_token = None
        session.commit()
        print(f"Admin user created successfully: id={admin.id} email={admin.email}")
    finally:
        session.close()


if __name__ == "__main__":
    create_admin()
