#!/usr/bin/env python
"""
Hippies Portal - Database Management CLI

Usage:
    python -m scripts.db_manage check        # Test database connection
    python -m scripts.db_manage migrate      # Run pending migrations
    python -m scripts.db_manage rollback     # Rollback last migration
    python -m scripts.db_manage current      # Show current migration version
    python -m scripts.db_manage history      # Show migration history
    python -m scripts.db_manage reset        # Drop all and recreate (dev only)
    python -m scripts.db_manage createadmin  # Create an admin account
    python -m scripts.db_manage setpassword  # Set password for an account
"""

import sys
from getpass import getpass

from alembic import command
from alembic.config import Config
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from portal.config import get_settings
from portal.database import check_connection, get_db_context
from portal.logging_config import configure_logging


settings = get_settings()


def alembic_config() -> Config:
    return Config("alembic.ini")


def prompt_password() -> str | None:
    """Ask twice; returns None (after printing why) if unacceptable."""
    password = getpass("New password: ")
    confirm = getpass("Confirm password: ")

    if password != confirm:
        print("Passwords do not match")
        return None

    if len(password) < settings.min_password_length:
        print(f"Password must be at least {settings.min_password_length} characters")
        return None

    # Bcrypt has a 72 byte limit
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        print(f"Password is too long ({len(password_bytes)} bytes).")
        print("Bcrypt has a 72-byte limit. Keep the password under 72 bytes.")
        return None

    return password


def cmd_check():
    """Test database connection."""
    print(f"Connecting to: {settings.database_url.split('?')[0]}")
    try:
        check_connection()
        print("Connection successful!")
        return True
    except SQLAlchemyError as e:
        print(f"Connection failed: {e}")
        return False


def cmd_migrate():
    """Run pending Alembic migrations."""
    print("Running migrations...")
    command.upgrade(alembic_config(), "head")
    print("Migrations complete!")
    return True


def cmd_rollback():
    """Rollback the last migration."""
    if not settings.debug:
        print("ERROR: rollback is only available in debug mode")
        return False

    print("Rolling back last migration...")
    command.downgrade(alembic_config(), "-1")
    print("Rollback complete!")
    return True


def cmd_current():
    """Show current migration version."""
    command.current(alembic_config())
    return True


def cmd_history():
    """Show migration history."""
    command.history(alembic_config())
    return True


def cmd_reset():
    """Drop all tables and recreate with migrations."""
    if not settings.debug:
        print("ERROR: reset is only available in debug mode")
        return False

    confirm = input("This will DELETE ALL DATA. Type 'yes' to confirm: ")
    if confirm.lower() != "yes":
        print("Aborted")
        return False

    alembic_cfg = alembic_config()

    print("Rolling back all migrations...")
    try:
        command.downgrade(alembic_cfg, "base")
    except SQLAlchemyError as e:
        print(f"Rollback failed (maybe no tables exist): {e}")

    print("Running all migrations...")
    command.upgrade(alembic_cfg, "head")

    print("Reset complete!")
    return True


def cmd_createadmin():
    """Create an admin account with a chosen password."""
    from portal.services.auth import AuthService
    from portal.services.employee import EmployeeService

    full_name = input("Full name: ").strip()
    email = input("Email: ").strip()
    if not full_name or not email:
        print("Full name and email are required")
        return False

    password = prompt_password()
    if password is None:
        return False

    with get_db_context() as db:
        service = EmployeeService(db, current_user_id=None)
        try:
            employee, _ = service.create_employee({
                "full_name": full_name,
                "email": email,
                "role": "admin",
            })
        except ValueError as e:
            print(f"Could not create admin: {e}")
            return False

        AuthService(db).set_password(employee, password, commit=False)
        db.commit()
        print(f"Admin {employee.full_name} created (id {employee.employee_id})")

    return True


def cmd_setpassword():
    """Set password for an account, looked up by email."""
    from portal.models.employee import Employee
    from portal.services.auth import AuthService

    email = input("Email: ").strip().lower()
    if not email:
        print("Email required")
        return False

    with get_db_context() as db:
        employee = db.execute(
            select(Employee).where(Employee.email == email)
        ).scalar_one_or_none()

        if not employee:
            print(f"No account for '{email}'")
            return False

        password = prompt_password()
        if password is None:
            return False

        auth = AuthService(db)
        auth.set_password(employee, password)

        print(f"Password updated for {employee.full_name}")

    return True


def cmd_help():
    """Show help."""
    print(__doc__)
    return True


COMMANDS = {
    "check": cmd_check,
    "migrate": cmd_migrate,
    "rollback": cmd_rollback,
    "current": cmd_current,
    "history": cmd_history,
    "reset": cmd_reset,
    "createadmin": cmd_createadmin,
    "setpassword": cmd_setpassword,
    "help": cmd_help,
}


def main():
    configure_logging(settings.log_level)

    if len(sys.argv) < 2:
        cmd_help()
        sys.exit(1)

    command_name = sys.argv[1].lower()

    if command_name not in COMMANDS:
        print(f"Unknown command: {command_name}")
        cmd_help()
        sys.exit(1)

    success = COMMANDS[command_name]()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
