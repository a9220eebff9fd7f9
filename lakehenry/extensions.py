from flask_sqlalchemy import SQLAlchemy
from flask_limiter import Limiter

from lakehenry.services.keyvalue import KeyValueStore
from lakehenry.services.storage import ObjectStore
from lakehenry.security.client import client_ip

# Application-wide extension instances

db = SQLAlchemy()
kv = KeyValueStore()
bucket = ObjectStore()
# Storage comes from RATELIMIT_STORAGE_URI (memory:// locally, Redis in production)
limiter = Limiter(key_func=client_ip)

__all__ = [
    "db",
    "kv",
    "bucket",
    "limiter",
]
