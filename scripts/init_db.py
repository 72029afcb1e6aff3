"""
Create ResourcePulse tables if they don't exist.

For development databases; use `alembic upgrade head` for managed ones.

Usage:
    python scripts/init_db.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from resourcepulse.database import Base, get_engine, init_db, test_connection


def main():
    print("=" * 60)
    print("Initializing ResourcePulse Database")
    print("=" * 60)

    success, message = test_connection()
    status = "[OK]" if success else "[FAILED]"
    print(f"\n    {status} {message}")
    if not success:
        return 1

    init_db(get_engine())
    for table in sorted(Base.metadata.tables):
        print(f"    [OK] {table}")

    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
