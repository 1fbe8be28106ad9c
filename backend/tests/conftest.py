import os

# Route modules build an engine at import time; keep tests off Postgres.
os.environ.setdefault("DATABASE_URL", "sqlite://")
