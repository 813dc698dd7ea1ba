"""
Database initialization script
Creates the task, label and task_label tables (optionally dropping them first)
"""
import argparse

from sqlalchemy import create_engine, inspect

from app.config import get_settings
from app.database import Base

# Import all models
from app.label.models import Label  # noqa: F401
from app.task.models import Task, TaskLabel  # noqa: F401


def init_db(drop: bool = False):
    settings = get_settings()
    engine = create_engine(settings.sqlalchemy_database_uri())

    if drop:
        print("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)

    print("Creating all tables...")
    Base.metadata.create_all(bind=engine)

    print("\n✅ Database initialized successfully!")

    # Show created tables
    inspector = inspect(engine)
    tables = inspector.get_table_names()
    print(f"\nCreated {len(tables)} tables:")
    for table in tables:
        print(f"  - {table}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the task board tables.")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    init_db(drop=args.drop)
