# Export core database utilities and models
#
# Engine/session objects live in backend.storage.db and are not re-exported
# here, so importing a model never opens a connection pool.

from backend.storage.base import Base
from backend.storage.models import Upload

__all__ = [
    "Base",
    "Upload",
]
