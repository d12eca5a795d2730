#!/usr/bin/env python
"""Seed script to create a user together with the company they own.

Prints a bearer token for the new user so the API can be exercised locally
before an identity provider is wired in.

Usage:
    python backend/scripts/seed_company_owner.py

Environment Variables:
    DATABASE_URL: Database connection string
    JWT_SECRET: Token signing key (must match the API)
    OWNER_EMAIL: Email for the user (default: owner@example.com)
    OWNER_NAME: Display name for the user (default: Company Owner)
    COMPANY_NAME: Company name (default: Example Company)
"""

import os
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from auth.jwt import create_access_token
from database import SessionLocal
from models.company import Company
from models.user import User


def main():
    """Create a company owner."""
    owner_email = os.getenv("OWNER_EMAIL", "owner@example.com").lower()
    owner_name = os.getenv("OWNER_NAME", "Company Owner")
    company_name = os.getenv("COMPANY_NAME", "Example Company")

    session = SessionLocal()

    try:
        existing_user = session.execute(
            select(User).where(User.email == owner_email)
        ).scalars().first()

        if existing_user:
            print(f"ERROR: User with email {owner_email} already exists")
            sys.exit(1)

        owner = User(email=owner_email, name=owner_name, status="ACTIVE")
        session.add(owner)
        session.flush()

        company = Company(owner_id=owner.id, name=company_name)
        session.add(company)
        session.commit()

        print("SUCCESS: Company owner created")
        print(f"  User ID:    {owner.id}")
        print(f"  Email:      {owner.email}")
        print(f"  Company ID: {company.id}")
        print(f"  Company:    {company.name}")
        print()
        print(f"  Token: {create_access_token(owner.id, email=owner.email)}")

    except (SQLAlchemyError, ValueError) as e:
        session.rollback()
        print(f"ERROR: Failed to create company owner: {e}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
