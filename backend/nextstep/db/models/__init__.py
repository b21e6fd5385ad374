"""ORM models exposed for metadata discovery."""
from nextstep.db.models.storage_blob import StorageBlob
from nextstep.db.models.user import User

__all__ = [
    "StorageBlob",
    "User",
]
