import os

import psycopg


host = os.getenv("FORUM_DB_HOST", "127.0.0.1")
port = int(os.getenv("FORUM_DB_PORT", "5432"))
name = os.getenv("FORUM_DB_NAME")
user = os.getenv("FORUM_DB_USER")
password = os.getenv("FORUM_DB_PASSWORD")

if not all([name, user, password]):
    raise SystemExit("Missing FORUM_DB_NAME/FORUM_DB_USER/FORUM_DB_PASSWORD")

with psycopg.connect(host=host, port=port, dbname=name, user=user, password=password) as conn:
    with conn.cursor() as cur:
        cur.execute("SELECT count(*) FROM topics WHERE delete_time IS NULL")
        live_topics = cur.fetchone()[0]
print(f"DB connection ok: {live_topics} live topics")
