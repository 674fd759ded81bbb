"""PostgreSQL analysis storage.

Notes
- Connection URLs are never logged to avoid leaking secrets.
- The `analyses` table is created on first use.
"""

from .config import PostgresConfig
from .stores import PostgresAnalysisStore, open_store
