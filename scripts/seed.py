#!/usr/bin/env python
"""
Generate seed data for development.

Scenarios:
    default  Development API clients devApiClient1 (key "dev1") and
             devApiClient2 (key "dev2")
    demo     The default clients plus a few users for each

A new client with a generated key can be provisioned with --new-client.
"""

import argparse
import asyncio
import sys


# Add src to path for imports
sys.path.insert(0, "src")

from usermgmt.core.auth import generate_api_key
from usermgmt.core.database import Base, async_engine, async_session_factory
from usermgmt.core.errors import DuplicateUserError
from usermgmt.modules.api_clients import ApiClient, ApiClientRepository
from usermgmt.modules.users.repos import UserRepository
from usermgmt.modules.users.services import UserService


DEV_CLIENTS = [
    {"name": "devApiClient1", "api_key": "dev1"},
    {"name": "devApiClient2", "api_key": "dev2"},
]

DEMO_USERS = [
    {
        "username": "alice",
        "full_name": "Alice Example",
        "email": "alice@example.com",
        "mobile_number": "+15550100",
        "language": "en",
        "culture": "en-US",
        "password": "Pass1234!",
    },
    {
        "username": "bob",
        "full_name": "Bob Example",
        "email": "bob@example.com",
        "mobile_number": "+15550101",
        "language": "de",
        "culture": "de-DE",
        "password": "Secret99?",
    },
]


async def create_tables() -> None:
    """Create any missing tables."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_default() -> list[ApiClient]:
    """Create the development API clients."""
    clients: list[ApiClient] = []
    async with async_session_factory() as session:
        repo = ApiClientRepository(session)
        for data in DEV_CLIENTS:
            existing = await repo.get_by_name(data["name"])
            if existing:
                print(f"API client already exists: {existing.name}")
                clients.append(existing)
                continue

            client = await repo.create(data["name"], data["api_key"])
            clients.append(client)
            print(f"Created API client: {client.name} (key: {data['api_key']})")

        await session.commit()
    return clients


async def seed_demo() -> None:
    """Create the development clients and demo users for each."""
    clients = await seed_default()

    async with async_session_factory() as session:
        service = UserService(UserRepository(session))
        for client in clients:
            for data in DEMO_USERS:
                try:
                    user = await service.create_user(data, client.id)
                except DuplicateUserError as exc:
                    print(f"{client.name}: {data['username']} skipped ({exc.message})")
                    continue
                print(f"{client.name}: created user {user.username} ({user.id})")

        await session.commit()


async def new_client(name: str) -> None:
    """Provision a client with a freshly generated key."""
    api_key = generate_api_key()
    async with async_session_factory() as session:
        client = await ApiClientRepository(session).create(name, api_key)
        await session.commit()
    print(f"Created API client: {client.name} ({client.id})")
    print(f"API key (shown once): {api_key}")


async def main(scenario: str, client_name: str | None, create: bool) -> None:
    """Run the seeding based on scenario."""
    if create:
        await create_tables()

    try:
        if client_name:
            await new_client(client_name)
        elif scenario == "default":
            await seed_default()
        elif scenario == "demo":
            await seed_demo()
        else:
            print(f"Unknown scenario: {scenario}")
            print("Available scenarios: default, demo")
            sys.exit(1)
    finally:
        await async_engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with development data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    parser.add_argument(
        "--new-client",
        metavar="NAME",
        help="Create one API client with a generated key instead of a scenario",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (without running migrations)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario, args.new_client, args.create_tables))
