"""ORM base and models; importing this package registers every table on ``Base.metadata``."""

from nextstep.db.base import Base
from nextstep.db.models import StorageBlob, User

__all__ = ["Base", "StorageBlob", "User"]
