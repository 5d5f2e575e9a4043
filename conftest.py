import os

# Tests run against in-memory SQLite and never seed demo rows
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-0123")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("LOG_SAMPLE_2XX", "0")
