from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from .adapters import follow_up_message, wa_link
from .config import Settings, load_settings
from .core.models import Channel, Enquiry, Role, Status
from .core.storage import JSONStorage
from .data.queries import (
    EnquiryFilter,
    assignee_name,
    current_user,
    dashboard_counts,
    due_soon,
    filter_enquiries,
    needs_attention,
)
from .data.store import EnquiryStore
from .errors import PrintmaxError
from .logging_config import setup_logging


def _fmt(value: datetime | None) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M") if value else "-"


def _row(store: EnquiryStore, e: Enquiry, now: datetime) -> str:
    flag = "!" if needs_attention(e, now) else " "
    return (
        f"{flag} {e.id}  [{e.status.value}] {e.title} ({e.category}, {e.channel.value})\n"
        f"    {e.customer_name} {e.phone or ''} | due {_fmt(e.due_at)} | "
        f"assigned to {assignee_name(store.state, e)}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="printmax", description="Print shop enquiry log.")
    parser.add_argument("--data", help="Path to the data file (overrides PRINTMAX_DATA_PATH).")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List enquiries, newest first.")
    ls.add_argument("--status", choices=[s.value for s in Status])
    ls.add_argument("--category")
    ls.add_argument("--channel", choices=[c.value for c in Channel])
    ls.add_argument("--assignee", help="User id.")
    ls.add_argument("--search")

    sub.add_parser("due", help="Open enquiries due today or overdue.")
    sub.add_parser("dashboard", help="Counts by status.")

    add = sub.add_parser("add", help="Log a new enquiry.")
    add.add_argument("title")
    add.add_argument("customer")
    add.add_argument("--category", default="")
    add.add_argument("--phone")
    add.add_argument("--channel", choices=[c.value for c in Channel], default=Channel.IN_SHOP.value)
    add.add_argument("--status", choices=[s.value for s in Status], default=Status.PENDING.value)
    add.add_argument("--due", type=datetime.fromisoformat, help="ISO date/time.")
    add.add_argument("--notes")
    add.add_argument("--assign", help="User id.")

    st = sub.add_parser("status", help="Change the status of an enquiry.")
    st.add_argument("id")
    st.add_argument("status", choices=[s.value for s in Status])

    rm = sub.add_parser("delete", help="Delete an enquiry.")
    rm.add_argument("id")

    ex = sub.add_parser("export", help="Write a JSON backup.")
    ex.add_argument("--output", type=Path)

    im = sub.add_parser("import", help="Replace ALL data with a JSON backup.")
    im.add_argument("file", type=Path)

    sub.add_parser("reset", help="Clear local data and reseed defaults.")

    li = sub.add_parser("login", help="Log in as a user.")
    li.add_argument("user_id")
    sub.add_parser("logout")

    users = sub.add_parser("users", help="List or add users.")
    users.add_argument("--add", metavar="NAME")
    users.add_argument("--role", choices=[r.value for r in Role], default=Role.STAFF.value)
    users.add_argument("--remove", metavar="USER_ID")

    cats = sub.add_parser("categories", help="List, add or remove categories.")
    cats.add_argument("--add", metavar="NAME")
    cats.add_argument("--remove", metavar="NAME")
    return parser


def run(args: argparse.Namespace, store: EnquiryStore, settings: Settings) -> int:
    now = store.now()
    if args.command == "list":
        filters = EnquiryFilter(
            status=args.status,
            category=args.category,
            channel=args.channel,
            assignee_id=args.assignee,
            text=args.search,
        )
        rows = filter_enquiries(store.state, filters)
        for e in rows:
            print(_row(store, e, now))
        if not rows:
            print("No enquiries found.")
    elif args.command == "due":
        for e in due_soon(store.state, now):
            print(_row(store, e, now))
            print(f"    {wa_link(e.phone, follow_up_message(e))}")
    elif args.command == "dashboard":
        counts = dashboard_counts(store.state)
        print(f"Due today / overdue: {len(due_soon(store.state, now))}")
        print(f"Pending: {counts.pending}")
        print(f"In Progress: {counts.in_progress}")
        print(f"Completed: {counts.completed}")
    elif args.command == "add":
        enquiry = store.create_enquiry(
            args.title,
            args.customer,
            category=args.category,
            phone=args.phone,
            channel=args.channel,
            status=args.status,
            due_at=args.due,
            notes=args.notes,
            assigned_to=args.assign or store.state.current_user_id,
        )
        print(enquiry.id)
    elif args.command == "status":
        store.set_status(args.id, args.status)
    elif args.command == "delete":
        store.delete_enquiry(args.id)
    elif args.command == "export":
        filename, data = store.export_backup()
        target = args.output or Path(settings.backup_dir) / filename
        target.write_bytes(data)
        print(target)
    elif args.command == "import":
        store.import_backup(args.file.read_bytes())
    elif args.command == "reset":
        store.reset()
    elif args.command == "login":
        store.login(args.user_id)
        user = current_user(store.state)
        print(f"Logged in as {user.name} ({user.role.value})" if user else "Unknown user.")
    elif args.command == "logout":
        store.logout()
    elif args.command == "users":
        if args.add:
            store.add_user(args.add, args.role)
        if args.remove:
            store.remove_user(args.remove)
        for u in store.state.users:
            print(f"{u.id}  {u.name} ({u.role.value})")
    elif args.command == "categories":
        if args.add:
            store.add_category(args.add)
        if args.remove:
            store.remove_category(args.remove)
        for c in store.state.categories:
            print(c)
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    log = setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)
    try:
        store = EnquiryStore(JSONStorage(args.data or settings.data_path))
        return run(args, store, settings)
    except PrintmaxError as exc:
        log.error("%s", exc)
        return 1
    except OSError as exc:
        log.error("File error: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
