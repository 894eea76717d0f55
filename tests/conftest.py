"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and points
the application at an in-memory SQLite database before anything imports
the settings.
"""

import os
import sys
from pathlib import Path

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["SESSION_STORE_BACKEND"] = "memory"

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Register the shared fixtures for every test module
from test_fixtures import (  # noqa: E402,F401
    api_client,
    clock,
    db_session,
    preferences_service,
    session_store,
)
