#!/usr/bin/env python3
"""Create an API key for the Bridge API."""

import argparse
import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from api.config import get_settings
from api.dependencies import generate_api_key
from core.db_models import ApiKeyModel, Base


async def insert_api_key(
    *,
    database_url: str,
    user_id: str,
    name: str,
    key_hash: str,
    expires_at: datetime,
) -> str:
    """Insert API key record via ORM (parameterized, no SQL string interpolation)."""
    engine = create_async_engine(database_url)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with session_factory() as session:
            api_key_model = ApiKeyModel(
                id=uuid4(),
                user_id=user_id,
                key_hash=key_hash,
                name=name,
                is_active=True,
                created_at=datetime.utcnow(),
                expires_at=expires_at,
                usage_count=0,
            )
            session.add(api_key_model)
            await session.commit()
            return str(api_key_model.id)
    finally:
        await engine.dispose()


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Create API key for the Bridge API")
    parser.add_argument("--user-id", required=True, help="User who will own scripts")
    parser.add_argument("--name", default="API Key", help="Label for the key")
    parser.add_argument("--days", type=int, default=365, help="Days the key stays valid")
    parser.add_argument(
        "--insert",
        action="store_true",
        help="Insert key metadata into the database from DATABASE_URL",
    )
    return parser.parse_args()


def main() -> None:
    """Generate API key and optionally insert metadata into the database."""
    args = parse_args()
    settings = get_settings()

    days_valid = args.days if args.days > 0 else 365
    api_key, key_hash = generate_api_key(settings.api_key_prefix)
    expires_at = datetime.utcnow() + timedelta(days=days_valid)

    print(f"API Key (store securely, shown once):\n  {api_key}\n")
    print(f"User ID: {args.user_id}")
    print(f"Name: {args.name}")
    print(f"Expires: {expires_at.isoformat()}\n")

    if args.insert:
        api_key_id = asyncio.run(
            insert_api_key(
                database_url=settings.database_url,
                user_id=args.user_id,
                name=args.name,
                key_hash=key_hash,
                expires_at=expires_at,
            )
        )
        print(f"Record inserted (row id {api_key_id}).")
    else:
        print("Dry run only (no DB write). Use --insert to persist the key.")


if __name__ == "__main__":
    main()
