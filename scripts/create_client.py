# Provision an M2M client from the command line.
#
#   python scripts/create_client.py --name "billing-service" --description "Billing jobs"
#   python scripts/create_client.py --rotate <client_id>
#
# The secret is printed once; only its hash is stored. Add the printed client
# ID to M2M_AUTH_ADMIN_CLIENT_IDS to make the first administrator.

import argparse
import asyncio
import sys

from m2m_auth_service.config import settings
from m2m_auth_service.crud.client_registry import ClientRegistry, CreatedClient
from m2m_auth_service.db import build_engine, build_session_factory, init_models
from m2m_auth_service.exceptions import AuthServiceError
from m2m_auth_service.security import build_secret_context


def print_credentials(created: CreatedClient) -> None:
    print(f"Client ID:     {created.record.client_id}")
    print(f"Client name:   {created.record.name}")
    print(f"Client secret: {created.client_secret}")
    print("Store the secret now; it cannot be shown again.")


async def provision_client(args: argparse.Namespace) -> bool:
    engine = build_engine(settings.DATABASE_URL)
    try:
        await init_models(engine)
        registry = ClientRegistry(
            build_session_factory(engine),
            build_secret_context(settings.CLIENT_SECRET_HASH_ROUNDS),
        )
        if args.rotate:
            print(f"Rotating secret for client: {args.rotate}")
            created = await registry.rotate_secret(args.rotate)
        else:
            print(f"Creating client: {args.name}")
            created = await registry.create(args.name, args.description)
        print_credentials(created)
        return True
    except AuthServiceError as e:
        print(f"Error during client configuration: {e.message}", file=sys.stderr)
        return False
    finally:
        await engine.dispose()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create an M2M client, or rotate an existing client's secret"
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--name", help="Client's user-friendly name")
    group.add_argument("--rotate", metavar="CLIENT_ID", help="Rotate this client's secret")
    parser.add_argument("--description", default=None, help="Optional description")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    sys.exit(0 if asyncio.run(provision_client(args)) else 1)
