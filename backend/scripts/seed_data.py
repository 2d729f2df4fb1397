#!/usr/bin/env python3
"""
Seed data script for the invoice notification backend.
This script applies migrations and creates a demo customer to invoice against.
"""

import logging
import subprocess
import sys
from pathlib import Path

from sqlmodel import Session, select

from app.core.config import settings
from app.core.db import create_db_engine
from app.models.customer import CustomerCreate
from app.models.domain import Customer
from app.services import CustomerService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_CUSTOMER = CustomerCreate(
    name="Demo Customer",
    email="demo@example.com",
    phone="9876543210",
    whatsapp_number="9876543210",
)


def run_migrations():
    """Run alembic migrations."""
    try:
        logger.info("Running migrations...")

        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=Path(__file__).parent.parent,
            capture_output=True,
            text=True,
            check=True
        )

        logger.info("Migration completed successfully")
        logger.info(f"Migration output: {result.stdout}")

        return True

    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed: {e}")
        logger.error(f"Error output: {e.stderr}")
        return False


def seed_demo_customer():
    """Create the demo customer unless it already exists."""
    engine = create_db_engine(settings.SQLALCHEMY_DATABASE_URI)
    try:
        with Session(engine) as session:
            existing = session.exec(
                select(Customer).where(Customer.whatsapp_number == DEMO_CUSTOMER.whatsapp_number)
            ).first()
            if existing:
                logger.info(f"Demo customer already present: {existing.id}")
                return
            customer = CustomerService(session).create_customer(DEMO_CUSTOMER)
            logger.info(f"Created demo customer: {customer.id}")
    finally:
        engine.dispose()


def main():
    """Main function."""
    logger.info("Starting seed data script...")

    if not run_migrations():
        logger.error("Seed data script failed")
        sys.exit(1)

    seed_demo_customer()
    logger.info("Seed data script completed successfully")
    sys.exit(0)


if __name__ == "__main__":
    main()
