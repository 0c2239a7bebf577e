#!/usr/bin/env python3
"""
Flux Review Database Setup Script
=================================

Creates the score tables and optionally seeds zero-point records for every
candidate in the applications export. Run before starting the server when
AUTO_CREATE_TABLES is disabled.

Usage:
    python scripts/setup_database.py [--check-only] [--seed]
"""

import sys
import logging
import argparse
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from flux_review.core.config import get_settings
from flux_review.core.errors import ServiceError
from flux_review.crud import score_store
from flux_review.db.base import Base
from flux_review.db.session import create_db_engine, create_session_factory, get_db_session, ping
from flux_review.services.directory import CandidateDirectory
from flux_review import models  # noqa: F401

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def test_connection(engine):
    """Test database connection"""
    logger.info("Testing database connection...")
    try:
        ping(engine)
        logger.info("Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


def missing_tables(engine):
    existing_tables = inspect(engine).get_table_names()
    return [table for table in Base.metadata.tables if table not in existing_tables]


def create_tables(engine):
    """Create all required tables"""
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info(f"Tables ready: {', '.join(Base.metadata.tables)}")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to create tables: {e}")
        return False


def seed_scores(engine, applications_path):
    """Insert zero-point records for candidates not yet scored"""
    directory = CandidateDirectory(applications_path)
    try:
        roll_nos = directory.roll_nos()
        with get_db_session(create_session_factory(engine)) as db:
            created = score_store.bulk_ensure(db, roll_nos)
    except ServiceError as e:
        logger.error(f"Seeding failed: {e}")
        return False
    logger.info(f"Seeded {created} new records from {len(roll_nos)} applications")
    return True


def main():
    """Main setup function"""
    parser = argparse.ArgumentParser(description='Flux Review Database Setup')
    parser.add_argument('--check-only', action='store_true',
                        help='Only check if tables exist, do not create')
    parser.add_argument('--seed', action='store_true',
                        help='Seed zero-point records from APPLICATIONS_PATH')
    args = parser.parse_args()

    settings = get_settings()
    engine = create_db_engine(settings)

    if not test_connection(engine):
        logger.error("Cannot proceed without database connection")
        sys.exit(1)

    missing = missing_tables(engine)
    if args.check_only:
        if missing:
            logger.error(f"Database check failed - missing tables: {missing}")
            sys.exit(1)
        logger.info("Database check passed - all tables exist")
        sys.exit(0)

    if missing and not create_tables(engine):
        sys.exit(1)

    if args.seed and not seed_scores(engine, settings.APPLICATIONS_PATH):
        sys.exit(1)

    logger.info("Database setup completed successfully")
    logger.info("You can now start the server with:")
    logger.info("  flux-review    (or: python -m flux_review.main)")
    engine.dispose()


if __name__ == "__main__":
    main()
