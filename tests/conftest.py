"""
Main conftest file that imports and re-exports all fixtures from modular files.
"""

import os

from dotenv import load_dotenv

# Explicitly load the test environment variables before importing any app modules
dotenv_path = os.path.join(os.path.dirname(__file__), "..", ".env.test")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path, override=True)
else:
    print(f"Warning: .env.test file not found at {dotenv_path}")

# Import and re-export fixtures from modular files
from tests.fixtures.client import admin_client, client  # noqa: E402,F401
from tests.fixtures.db import db_engine, session_factory  # noqa: E402,F401
from tests.fixtures.fakes import fake_clock, secret_store  # noqa: E402,F401
from tests.fixtures.services import registry, services  # noqa: E402,F401
