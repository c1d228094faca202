# wavy/cli.py
#
# Maintenance commands, installed as ``wavy-admin``:
#   wavy-admin init-db
#   wavy-admin create-admin --email admin@example.com --password ...
#   wavy-admin purge-tokens

import argparse
import getpass
import logging
import sys

from fastapi import HTTPException

from .config import settings
from .db.init import init_database
from .db.session import SessionLocal
from .logging_config import LoggingConfig
from .security.deps import ADMIN
from .services.auth import create_account, find_user_by_email, grant_role
from .services.tokens import purge_expired_tokens

logger = logging.getLogger(__name__)


def cmd_init_db(args) -> int:
    init_database()
    print("Database tables created.")
    return 0


def cmd_create_admin(args) -> int:
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("Password must be at least 6 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = find_user_by_email(db, args.email)
        if user is None:
            user = create_account(db, email=args.email, password=password, full_name=args.name, role=ADMIN)
            print(f"Admin account created: {user.email}")
        elif grant_role(db, user.id, ADMIN):
            print(f"Existing account {user.email} promoted to admin.")
        else:
            print(f"{user.email} is already an admin.")
        db.commit()
    except HTTPException as e:
        db.rollback()
        print(f"Error: {e.detail}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


def cmd_purge_tokens(args) -> int:
    db = SessionLocal()
    try:
        counts = purge_expired_tokens(db)
    finally:
        db.close()
    for name, count in counts.items():
        print(f"{name}: {count}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wavy-admin", description="Wavy Services backend maintenance")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create missing tables and upload directories")
    init_db.set_defaults(func=cmd_init_db)

    create_admin = subparsers.add_parser("create-admin", help="Create an admin account or promote an existing one")
    create_admin.add_argument("--email", required=True)
    create_admin.add_argument("--password", help="Prompted for when omitted")
    create_admin.add_argument("--name", default=None, help="Full name shown in the back-office")
    create_admin.set_defaults(func=cmd_create_admin)

    purge = subparsers.add_parser("purge-tokens", help="Delete or retire expired OTP, reset, invitation and CRA tokens")
    purge.set_defaults(func=cmd_purge_tokens)

    return parser


def main(argv=None) -> int:
    LoggingConfig.setup_logging(settings)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
