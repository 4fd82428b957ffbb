from __future__ import annotations

import argparse
import time
import uuid

from .client import ApiClient, LiveDataPoller
from .config import configure_logging
from .health_service import create_vaccine_schedule, list_vaccines
from .seed import seed_base
from .services import init_db, list_babies, list_users, upsert_baby, upsert_user


def cmd_init(args: argparse.Namespace) -> None:
    init_db()
    seed_base()
    print("Database ready, reference data loaded.")


def cmd_list(args: argparse.Namespace) -> None:
    if args.entity == "users":
        for u in list_users():
            print(f"{u['id']} | {u['firstName']} {u['lastName']} | {u['email']} | {len(u['babies'])} baby(ies)")
    elif args.entity == "babies":
        for b in list_babies():
            print(f"{b['id']} | {b['name']} | born {b['birthDate']:%Y-%m-%d} | parent: {b['user']['email']}")


def cmd_add_user(args: argparse.Namespace) -> None:
    user = upsert_user(
        {
            "id": args.id or str(uuid.uuid4()),
            "email": args.email,
            "first_name": args.first_name,
            "last_name": args.last_name,
        }
    )
    print(f"User saved: {user['id']}")


def cmd_add_baby(args: argparse.Namespace) -> None:
    baby = upsert_baby(
        baby_id=args.id or str(uuid.uuid4()),
        name=args.name,
        birth_date=args.birth_date,
        user_id=args.user_id,
        gender=args.gender,
    )
    print(f"Baby saved: {baby['id']}")


def cmd_vaccine_schedule(args: argparse.Namespace) -> None:
    created = create_vaccine_schedule(args.baby_id)
    print(f"{len(created)} vaccine(s) scheduled.")
    for v in list_vaccines(args.baby_id):
        print(f"{v['scheduledDate']:%Y-%m-%d} | {v['status']:<8} | {v['ageGroup']} | {v['name']}")


def cmd_live(args: argparse.Namespace) -> None:
    """
    Poll the live-data endpoint of a running API and print today's totals
    (Ctrl+C to stop).
    """

    def show(data: dict) -> None:
        s = data["liveData"]["stats"]
        since = s["timeSinceLastFeeding"]
        print(
            f"[{data['timestamp']}] {data['baby']['name']}: "
            f"milk {s['totalMilk']} ml | sleep {s['totalSleepMinutes']} min | "
            f"{s['feedingCount']} feedings, {s['sleepCount']} sleeps, {s['diaperCount']} diapers | "
            f"last feeding {since if since is not None else '-'} min ago"
        )

    poller = LiveDataPoller(ApiClient(args.api), args.baby_id, args.email, interval=args.interval, on_update=show)
    with poller:
        try:
            while True:
                time.sleep(1)
                if args.once and (poller.data is not None or poller.error):
                    break
        except KeyboardInterrupt:
            pass
    if poller.error:
        print(f"Last error: {poller.error}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="babytracker", description="BabyTracker Pro command line")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Create tables and load reference data")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="List records")
    p_list.add_argument("entity", choices=["users", "babies"])
    p_list.set_defaults(func=cmd_list)

    p_user = sub.add_parser("add-user", help="Create or update a user")
    p_user.add_argument("--id", default=None, help="defaults to a new UUID")
    p_user.add_argument("--email", required=True)
    p_user.add_argument("--first-name", required=True)
    p_user.add_argument("--last-name", required=True)
    p_user.set_defaults(func=cmd_add_user)

    p_baby = sub.add_parser("add-baby", help="Create or update a baby")
    p_baby.add_argument("--id", default=None, help="defaults to a new UUID")
    p_baby.add_argument("--user-id", required=True)
    p_baby.add_argument("--name", required=True)
    p_baby.add_argument("--birth-date", required=True, help="ISO date, e.g. 2026-03-01")
    p_baby.add_argument("--gender", choices=["boy", "girl"], default=None)
    p_baby.set_defaults(func=cmd_add_baby)

    p_vac = sub.add_parser("vaccine-schedule", help="Create the standard vaccine schedule of a baby")
    p_vac.add_argument("--baby-id", required=True)
    p_vac.set_defaults(func=cmd_vaccine_schedule)

    p_live = sub.add_parser("live", help="Follow today's live data through the API")
    p_live.add_argument("--baby-id", required=True)
    p_live.add_argument("--email", required=True)
    p_live.add_argument("--api", default=None, help="API base URL (default: API_BASE)")
    p_live.add_argument("--interval", type=float, default=None, help="seconds between refreshes")
    p_live.add_argument("--once", action="store_true", help="print one snapshot and exit")
    p_live.set_defaults(func=cmd_live)

    return p


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    init_db()  # make sure tables exist
    args.func(args)


if __name__ == "__main__":
    main()
