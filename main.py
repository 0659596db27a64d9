#!/usr/bin/env python3
"""
Heron -- command-line management for the Heron CMS.

Usage:
  python main.py migrate
  python main.py admins list
  python main.py admins add editor@example.com --name "Editor"
  python main.py admins remove 3
  python main.py serve --port 8000 --reload

Environment variables:
  CMS_DB_PATH   SQLite database path (default ./data/cms.db).
  SECRET_KEY    Required unless DEBUG=true.
"""

import argparse
import sys

from auth.actions import (
    AdminUserExists,
    AdminUserNotFound,
    BaseAdminProtected,
    add_admin_user,
    list_admin_users,
    remove_user,
)
from auth.store import UserStore
from core.migrate import upgrade_head


def _open_store() -> UserStore:
    """Bring the database to head, then open it. Admin commands may be the first thing run."""
    upgrade_head()
    return UserStore()


def _cmd_migrate(args: argparse.Namespace) -> int:
    upgrade_head()
    print("Database is up to date.")
    return 0


def _cmd_admins_list(args: argparse.Namespace) -> int:
    store = _open_store()
    try:
        rows = list_admin_users(store)
    finally:
        store.close()
    if not rows:
        print("  No admin users.")
        return 0
    for row in rows:
        marker = " (base)" if row.is_base_admin else ""
        name = f"  {row.name}" if row.name else ""
        print(f"  {row.id:>4}  {row.email}{marker}{name}")
    return 0


def _cmd_admins_add(args: argparse.Namespace) -> int:
    store = _open_store()
    try:
        created = add_admin_user(store, args.email, args.name)
    except AdminUserExists:
        print(f"  [!] {args.email} is already an admin user.")
        return 1
    except ValueError as e:
        print(f"  [!] {e}")
        return 1
    finally:
        store.close()
    print(f"  Added {created.email} (id {created.id}).")
    return 0


def _cmd_admins_remove(args: argparse.Namespace) -> int:
    store = _open_store()
    try:
        remove_user(store, args.id)
    except (AdminUserNotFound, BaseAdminProtected) as e:
        print(f"  [!] {e}")
        return 1
    finally:
        store.close()
    print(f"  Removed admin user {args.id}.")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heron",
        description="Manage the Heron CMS database, admin list, and server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    migrate.set_defaults(func=_cmd_migrate)

    admins = sub.add_parser("admins", help="Manage the admin allow-list")
    admins_sub = admins.add_subparsers(dest="admins_command", metavar="ACTION")

    admins_list = admins_sub.add_parser("list", help="List admin users")
    admins_list.set_defaults(func=_cmd_admins_list)

    admins_add = admins_sub.add_parser("add", help="Add an e-mail address to the admin list")
    admins_add.add_argument("email", metavar="EMAIL")
    admins_add.add_argument("--name", default="", help="Display name")
    admins_add.set_defaults(func=_cmd_admins_add)

    admins_remove = admins_sub.add_parser("remove", help="Remove an admin user by id")
    admins_remove.add_argument("id", type=int, metavar="ID")
    admins_remove.set_defaults(func=_cmd_admins_remove)

    serve = sub.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
