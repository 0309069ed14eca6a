"""Block until the Postgres behind DATABASE_URL accepts connections. SQLite URLs return immediately."""
import os, time
from urllib.parse import urlparse

import psycopg2

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")

if not DATABASE_URL.startswith("sqlite"):
    # SQLAlchemy URL may carry a driver suffix (postgresql+psycopg2://)
    p = urlparse("postgresql://" + DATABASE_URL.split("://", 1)[1])
    params = dict(
        host=p.hostname or "db",
        port=p.port or 5432,
        user=p.username or "aeroledger",
        password=p.password or "aeroledger",
        dbname=(p.path or "/aeroledger").lstrip("/") or "aeroledger",
    )
    timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    deadline = time.time() + timeout_s

    print(f"[wait_for_db] Waiting for Postgres at {params['host']}:{params['port']} db={params['dbname']} (timeout={timeout_s}s)")
    while True:
        try:
            psycopg2.connect(**params).close()
            print("[wait_for_db] Postgres is ready.")
            break
        except psycopg2.OperationalError as e:
            if time.time() > deadline:
                print(f"[wait_for_db] Timed out waiting for DB. Last error: {e}")
                raise
            time.sleep(1)
