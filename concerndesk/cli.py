"""CLI for ConcernDesk: bootstrap users, watch and triage concerns."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys

from concerndesk.config import get_settings


async def cmd_init_db(args):
    """Create database tables."""
    from concerndesk.db.engine import create_tables, engine

    await create_tables()
    await engine.dispose()
    print("Database tables created")


async def cmd_create_user(args):
    """Create a user (or admin) account."""
    from concerndesk.db import crud
    from concerndesk.db.engine import async_session_factory, create_tables, engine
    from concerndesk.services.auth import hash_password

    await create_tables()

    password = args.password
    if not password:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    async with async_session_factory() as db:
        if await crud.get_user_by_email(db, args.email):
            print(f"User already exists: {args.email}")
            sys.exit(1)
        user = await crud.create_user(
            db, args.email, hash_password(password),
            display_name=args.display_name or "",
            role="admin" if args.admin else "user",
        )
    await engine.dispose()
    print(f"User created: {user.email} (id={user.id}, role={user.role})")


async def _connect(args):
    from concerndesk.client.api import ConcernClient

    settings = get_settings()
    client = ConcernClient(
        args.api_url or settings.api_url,
        token=args.token or None,
        timeout=settings.retry.request_timeout_seconds,
    )
    if not client.token:
        password = args.password or getpass.getpass("Password: ")
        await client.login(args.email, password)
    return client


async def cmd_watch(args):
    """Poll the concern list and unread count, printing changes."""
    from concerndesk.client.poller import ReconcilingPoller
    from concerndesk.client.presentation import summarize

    settings = get_settings()
    client = await _connect(args)
    fetch = client.list_all_concerns if args.admin else client.list_concerns
    interval = args.interval or (
        settings.poller.admin_interval_seconds if args.admin else settings.poller.owner_interval_seconds
    )

    def show(concerns):
        print(f"\n── {len(concerns)} concern(s) ──")
        for c in concerns:
            print(summarize(c))

    concerns = ReconcilingPoller(fetch, interval, on_update=show, name="concerns")
    unread = ReconcilingPoller(
        client.count_unread, settings.poller.unread_interval_seconds,
        on_update=lambda n: print(f"Unread notifications: {n}"),
        name="unread",
    )
    try:
        await concerns.start()
        await unread.start()
        while True:
            await asyncio.sleep(1)
            if concerns.has_new_data:
                print("(new data)")
                concerns.acknowledge()
    finally:
        await concerns.close()
        await unread.close()
        await client.aclose()


async def cmd_respond(args):
    """Resolve a concern with a decorated admin response."""
    from concerndesk.client.presentation import format_response
    from concerndesk.client.retry import RetryingWriter

    client = await _connect(args)
    writer = RetryingWriter.from_config(get_settings().retry)
    text = format_response(args.text, bold=args.bold, italic=args.italic, underline=args.underline)
    try:
        concern = await writer.run(client.respond, args.id, text)
    finally:
        await client.aclose()
    print(f"Concern {concern.id} is now {concern.status}")


async def cmd_set_status(args):
    """Change a concern's status."""
    from concerndesk.client.retry import RetryingWriter

    client = await _connect(args)
    writer = RetryingWriter.from_config(get_settings().retry)
    try:
        concern = await writer.run(client.set_status, args.id, args.status)
    finally:
        await client.aclose()
    print(f"Concern {concern.id} is now {concern.status}")


def _add_connection_args(p):
    p.add_argument("--api-url", default="", help="API base URL (defaults to settings.api_url)")
    p.add_argument("--token", default="", help="Bearer token (skips login)")
    p.add_argument("--email", default="", help="Login email")
    p.add_argument("--password", default="", help="Login password (prompted if not given)")


def main():
    parser = argparse.ArgumentParser(description="ConcernDesk CLI")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    cu = subparsers.add_parser("create-user", help="Create a user account")
    cu.add_argument("--email", required=True, help="User email")
    cu.add_argument("--password", default="", help="Password (prompted if not given)")
    cu.add_argument("--display-name", default="", help="Display name")
    cu.add_argument("--admin", action="store_true", help="Grant admin role")

    w = subparsers.add_parser("watch", help="Watch concerns for changes")
    _add_connection_args(w)
    w.add_argument("--admin", action="store_true", help="Watch all concerns (admin)")
    w.add_argument("--interval", type=float, default=0, help="Poll interval in seconds")

    r = subparsers.add_parser("respond", help="Respond to a concern")
    _add_connection_args(r)
    r.add_argument("--id", required=True, help="Concern id")
    r.add_argument("--text", required=True, help="Response text")
    r.add_argument("--bold", action="store_true")
    r.add_argument("--italic", action="store_true")
    r.add_argument("--underline", action="store_true")

    s = subparsers.add_parser("set-status", help="Change a concern's status")
    _add_connection_args(s)
    s.add_argument("--id", required=True, help="Concern id")
    s.add_argument("--status", required=True, choices=["pending", "in_progress", "resolved"])

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=get_settings().log_level, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "init-db": cmd_init_db,
        "create-user": cmd_create_user,
        "watch": cmd_watch,
        "respond": cmd_respond,
        "set-status": cmd_set_status,
    }
    try:
        asyncio.run(commands[args.command](args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
