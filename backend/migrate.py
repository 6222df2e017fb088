#!/usr/bin/env python3
"""
Database migration helper for the poker ledger cloud tables.

Usage:
    python migrate.py create "description of changes"  # Create a new migration
    python migrate.py upgrade                          # Apply all pending migrations
    python migrate.py downgrade                        # Rollback one migration
    python migrate.py current                          # Show current migration version
    python migrate.py history                          # Show migration history
    python migrate.py stamp <revision>                 # Mark database as being at a specific revision

The target database is taken from DB_URL (environment or .env).
"""

import sys

from alembic import command

from poker_ledger.core.migrations import get_alembic_config, run_migrations, stamp_database


def create_migration(message: str):
    """Create a new migration with autogenerate."""
    print(f"Creating new migration: {message}")
    command.revision(get_alembic_config(), message=message, autogenerate=True)
    print("Migration created successfully!")
    print("\nNext steps:")
    print("1. Review the generated migration file in alembic/versions/")
    print("2. Apply it: python migrate.py upgrade")


def downgrade_migration():
    """Rollback one migration."""
    print("Rolling back one migration...")
    command.downgrade(get_alembic_config(), "-1")
    print("Migration rolled back successfully!")


def print_usage():
    print(__doc__)


def main():
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    cmd = sys.argv[1].lower()

    if cmd == "create":
        if len(sys.argv) < 3:
            print("Error: Please provide a migration message")
            print('Usage: python migrate.py create "description of changes"')
            sys.exit(1)
        create_migration(sys.argv[2])

    elif cmd == "upgrade":
        run_migrations()
        print("Migrations applied successfully!")

    elif cmd == "downgrade":
        downgrade_migration()

    elif cmd == "current":
        command.current(get_alembic_config())

    elif cmd == "history":
        command.history(get_alembic_config())

    elif cmd == "stamp":
        if len(sys.argv) < 3:
            print("Error: Please provide a revision")
            print("Usage: python migrate.py stamp <revision>")
            sys.exit(1)
        stamp_database(sys.argv[2])

    else:
        print(f"Error: Unknown command '{cmd}'")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
