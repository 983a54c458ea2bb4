"""Root conftest — shared test configuration."""

import os

# Tests never reach real infrastructure: sandbox env, mock rates, no SMTP
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("PAYOUTS_MODE", "simulated")
os.environ.setdefault("RATE_PROVIDER", "mock")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
