# create_tables.py
import argparse

from app.database import Base, engine
from app import models  # noqa: F401

def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    try:
        if drop_existing:
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Existing tables dropped")

        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")
        print(f"   Tables: {', '.join(sorted(Base.metadata.tables))}")

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        raise

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the Task Manager database schema")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    create_tables(drop_existing=args.drop)
