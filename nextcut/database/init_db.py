"""
Database initialization and seeding.

This script:
- Creates all database tables
- Optionally seeds sample barbers and customers around Bengaluru
- Can reset the database (drop and recreate)

Usage:
    # Create tables
    python -m nextcut.database.init_db

    # Reset database (drops all tables and recreates)
    python -m nextcut.database.init_db --reset

    # Add sample data for testing
    python -m nextcut.database.init_db --sample-data
"""

import argparse
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from nextcut.config import print_settings
from nextcut.core.logging import setup_logging
from nextcut.database.session import create_all_tables, drop_all_tables, engine, get_db_context
from nextcut.models import Barber, Customer, QueueEntry, ServiceRecord


SAMPLE_BARBERS = [
    {"name": "Ravi's Cuts", "username": "ravi", "lat": 12.9716, "long": 77.5946},
    {"name": "Indiranagar Fades", "username": "fades", "lat": 12.9784, "long": 77.6408,
     "minutes_per_customer": 20},
    {"name": "Koramangala Trim", "username": "trim", "lat": 12.9352, "long": 77.6245},
]

SAMPLE_CUSTOMERS = [
    {"name": "Asha", "phone_number": "9800000001"},
    {"name": "Vikram", "phone_number": "9800000002"},
    {"name": "Meera", "phone_number": "9800000003"},
]


def create_tables(reset: bool = False, engine_instance: Optional[Engine] = None) -> None:
    """
    Create all database tables.

    Args:
        reset: If True, drop existing tables first
        engine_instance: Engine to use (default: the global engine)
    """
    engine_instance = engine_instance or engine
    if reset:
        print("Dropping existing tables...")
        drop_all_tables(engine_instance)

    print("Creating database tables...")
    create_all_tables(engine_instance)


def seed_sample_data(session_factory: Optional[sessionmaker] = None) -> None:
    """Add sample barbers and customers, skipping ones that already exist."""
    print("Seeding sample data...")

    with get_db_context(session_factory) as db:
        for data in SAMPLE_BARBERS:
            if db.query(Barber).filter_by(username=data["username"]).first():
                print(f"  Barber '{data['username']}' already exists (skipping)")
                continue
            barber = Barber(**data)
            db.add(barber)
            print(f"  Created: {barber}")

        for data in SAMPLE_CUSTOMERS:
            if db.query(Customer).filter_by(phone_number=data["phone_number"]).first():
                print(f"  Customer '{data['phone_number']}' already exists (skipping)")
                continue
            db.add(Customer(**data))
            print(f"  Created customer: {data['name']}")


def print_database_status(session_factory: Optional[sessionmaker] = None) -> dict:
    """Print current row counts and return them."""
    with get_db_context(session_factory) as db:
        counts = {
            "barbers": db.query(Barber).count(),
            "customers": db.query(Customer).count(),
            "queue_entries": db.query(QueueEntry).count(),
            "service_records": db.query(ServiceRecord).count(),
        }

    print("=" * 40)
    for table, count in counts.items():
        print(f"  {table:<16} {count}")
    print("=" * 40)
    return counts


def initialize_database(reset: bool = False, sample_data: bool = False,
                        engine_instance: Optional[Engine] = None,
                        session_factory: Optional[sessionmaker] = None) -> dict:
    """
    Initialize the database.

    Args:
        reset: Drop existing tables before creating
        sample_data: Add sample data for testing
        engine_instance: Engine to use (default: the global engine)
        session_factory: Session factory bound to that engine

    Returns:
        Row counts per table after initialization
    """
    create_tables(reset=reset, engine_instance=engine_instance)

    if sample_data:
        seed_sample_data(session_factory)

    return print_database_status(session_factory)


def main(argv=None):
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Initialize and seed the NextCut database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nextcut-init-db
  nextcut-init-db --reset
  nextcut-init-db --reset --sample-data
        """
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables before creating (WARNING: deletes all data!)"
    )

    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Add sample barbers and customers"
    )

    args = parser.parse_args(argv)
    setup_logging()
    print_settings()

    # Confirm reset if requested
    if args.reset:
        print("WARNING: This will DELETE ALL DATA in the database!")
        response = input("Are you sure? Type 'yes' to continue: ")
        if response.lower() != 'yes':
            print("Aborted")
            return

    initialize_database(reset=args.reset, sample_data=args.sample_data)


if __name__ == "__main__":
    main()
