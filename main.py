#!/usr/bin/env python3
"""
Stockroom -- Inventory management REST API with JWT authentication.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py init-db
  python main.py seed
  python main.py create-user johndoe john@example.com

Environment variables (or .env):
  SECRET_KEY     Required unless DEBUG=true. At least 32 characters.
  DATABASE_URL   Any SQLAlchemy URL. Defaults to ./stockroom.db (SQLite).
  DEBUG          true to auto-generate a throwaway SECRET_KEY.
"""

import argparse
import getpass
import logging
import sys
from datetime import timedelta

from pydantic import ValidationError

from api.main import configure_logging
from api.models import RegisterRequest
from auth.hashing import BcryptHasher
from auth.models import RegisterCommand
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import JWTTokenIssuer
from core.config import Settings, get_settings
from core.database import init_schema, make_engine
from core.errors import InventoryError
from inventory.models import Item
from inventory.service import InventoryService
from inventory.store import ItemStore

logger = logging.getLogger("stockroom.cli")

# Demo catalogue loaded by `seed`. Existing SKUs are skipped, so re-running is safe.
SAMPLE_ITEMS = [
    Item(
        name="Laptop - Dell XPS 15",
        sku="LAPTOP-XPS15-001",
        description="15.6-inch laptop, Intel Core i7, 16GB RAM, 512GB SSD",
        quantity=25,
        price=1299.99,
        category="Electronics",
    ),
    Item(
        name="Wireless Mouse - Logitech MX Master 3",
        sku="MOUSE-MX3-001",
        description="Ergonomic wireless mouse with USB-C charging",
        quantity=150,
        price=99.99,
        category="Accessories",
    ),
    Item(
        name="Mechanical Keyboard - Keychron K2",
        sku="KEYBOARD-K2-001",
        description="Compact 75% wireless mechanical keyboard",
        quantity=75,
        price=89.99,
        category="Accessories",
    ),
    Item(
        name='Monitor - LG 27" 4K',
        sku="MONITOR-LG27-001",
        description="27-inch 4K UHD IPS monitor with HDR10",
        quantity=40,
        price=449.99,
        category="Electronics",
    ),
    Item(
        name="USB-C Hub - Anker 7-in-1",
        sku="HUB-ANKER7-001",
        description="7-in-1 USB-C hub with HDMI, SD card reader and 100W power delivery",
        quantity=200,
        price=49.99,
        category="Accessories",
    ),
    Item(
        name="Webcam - Logitech C920",
        sku="WEBCAM-C920-001",
        description="1080p HD webcam with stereo microphones",
        quantity=60,
        price=79.99,
        category="Electronics",
    ),
    Item(
        name="Headphones - Sony WH-1000XM4",
        sku="HEADPHONE-SONY-001",
        description="Wireless noise-cancelling over-ear headphones",
        quantity=45,
        price=349.99,
        category="Audio",
    ),
    Item(
        name="External SSD - Samsung T7 1TB",
        sku="SSD-T7-1TB-001",
        description="Portable USB 3.2 solid state drive, 1TB",
        quantity=100,
        price=159.99,
        category="Storage",
    ),
    Item(
        name="Docking Station - CalDigit TS3 Plus",
        sku="DOCK-TS3-001",
        description="Thunderbolt 3 dock with 15 ports",
        quantity=30,
        price=299.99,
        category="Accessories",
    ),
    Item(
        name="Standing Desk - FlexiSpot E7",
        sku="DESK-E7-001",
        description="Electric height-adjustable standing desk",
        quantity=15,
        price=599.99,
        category="Furniture",
    ),
]


def _serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "asgi:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _init_db(args: argparse.Namespace, settings: Settings) -> int:
    engine = make_engine(settings.database_url)
    # auth.store and inventory.store are imported above, so both tables are registered.
    init_schema(engine)
    engine.dispose()
    print(f"Database ready at {engine.url.render_as_string(hide_password=True)}")
    return 0


def _seed(args: argparse.Namespace, settings: Settings) -> int:
    store = ItemStore(make_engine(settings.database_url))
    service = InventoryService(store)
    created = skipped = 0
    try:
        for sample in SAMPLE_ITEMS:
            if store.get_item_by_sku(sample.sku) is not None:
                logger.info("Skipping %s: SKU already present", sample.sku)
                skipped += 1
                continue
            service.create_item(sample)
            created += 1
    finally:
        store.close()
    print(f"Seeded {created} item(s), skipped {skipped} existing SKU(s).")
    return 0


def _create_user(args: argparse.Namespace, settings: Settings) -> int:
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("  [!] Passwords do not match.", file=sys.stderr)
        return 1
    # Same bounds as POST /api/v1/auth/register.
    try:
        body = RegisterRequest(username=args.username, email=args.email, password=password)
    except ValidationError as exc:
        for err in exc.errors():
            print(f"  [!] {'.'.join(str(part) for part in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    store = UserStore(make_engine(settings.database_url))
    service = AuthService(
        store=store,
        hasher=BcryptHasher(rounds=settings.bcrypt_rounds),
        tokens=JWTTokenIssuer(settings.secret_key),
        token_duration=timedelta(seconds=settings.token_expire_seconds),
    )
    try:
        user = service.register(RegisterCommand(username=body.username, email=body.email, password=body.password))
    except InventoryError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"Created user {user.username} (id={user.id}).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stockroom",
        description="Inventory management REST API with JWT authentication.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --reload
  python main.py init-db
  python main.py seed
  python main.py create-user johndoe john@example.com
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the API server with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(handler=_serve)

    init_db = sub.add_parser("init-db", help="Create any missing tables and indexes")
    init_db.set_defaults(handler=_init_db)

    seed = sub.add_parser("seed", help="Load the sample catalogue, skipping SKUs already present")
    seed.set_defaults(handler=_seed)

    create_user = sub.add_parser("create-user", help="Register an account; prompts for the password")
    create_user.add_argument("username", help="3-50 characters")
    create_user.add_argument("email", help="Account email address")
    create_user.set_defaults(handler=_create_user)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "handler", None):
        parser.print_help()
        return 1

    settings = get_settings()
    configure_logging(settings.log_level)
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
