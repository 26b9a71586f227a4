import os

# Keep the app's engine off PostgreSQL when routers get imported under test.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
