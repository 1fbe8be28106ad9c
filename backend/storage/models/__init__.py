# Re-export all models so Base.metadata sees every table

from backend.storage.models.upload import Upload

__all__ = [
    "Upload",
]
