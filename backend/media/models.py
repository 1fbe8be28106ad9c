from typing import Optional
from pydantic import BaseModel


class StagedFile(BaseModel):
    """A media file held in the AI provider's file storage."""

    name: str
    uri: str
    state: str
    mime_type: str = ""


class MediaAttachment(BaseModel):
    """
    Media sent alongside the prompt: either inline base64 bytes (images)
    or a reference to a staged file (videos).
    """

    mime_type: str
    inline_base64: Optional[str] = None
    file_uri: Optional[str] = None

    @classmethod
    def inline(cls, data: str, mime_type: str) -> "MediaAttachment":
        return cls(mime_type=mime_type, inline_base64=data)

    @classmethod
    def reference(cls, staged: StagedFile, mime_type: Optional[str] = None) -> "MediaAttachment":
        return cls(mime_type=mime_type or staged.mime_type, file_uri=staged.uri)
