import base64
from typing import Optional

from google import genai
from google.genai import types

from backend.media.models import MediaAttachment, StagedFile

DEFAULT_MODEL_NAME = "gemini-2.5-flash"


def _state_name(state) -> str:
    if state is None:
        return "STATE_UNSPECIFIED"
    return getattr(state, "name", None) or str(state)


class GeminiClient:
    """
    Thin wrapper around google-genai covering the two capabilities the
    verification pipeline consumes: content generation and the File API.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = DEFAULT_MODEL_NAME,
        enable_search: bool = True,
    ):
        if not api_key:
            raise ValueError(
                "GEMINI_API_KEY environment variable is not set. "
                "Get one from https://aistudio.google.com/apikey"
            )
        self.model_name = model_name
        self.enable_search = enable_search
        self._client = genai.Client(api_key=api_key)

    def _build_contents(self, prompt: str, attachment: Optional[MediaAttachment]):
        if attachment is None:
            return prompt

        if attachment.inline_base64 is not None:
            media_part = types.Part.from_bytes(
                data=base64.b64decode(attachment.inline_base64),
                mime_type=attachment.mime_type,
            )
        else:
            media_part = types.Part.from_uri(
                file_uri=attachment.file_uri,
                mime_type=attachment.mime_type,
            )
        return [media_part, prompt]

    def generate(self, prompt: str, attachment: Optional[MediaAttachment] = None) -> str:
        config = None
        if self.enable_search:
            # Grounding lets the model look up historical weather and news
            config = types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())]
            )

        response = self._client.models.generate_content(
            model=self.model_name,
            contents=self._build_contents(prompt, attachment),
            config=config,
        )

        if not response or not response.text:
            print("[Gemini] Empty response from model")
            return ""

        return response.text.strip()

    @staticmethod
    def _to_staged(file, mime_type: Optional[str] = None) -> StagedFile:
        return StagedFile(
            name=file.name,
            uri=file.uri or "",
            state=_state_name(file.state),
            mime_type=file.mime_type or mime_type or "",
        )

    def upload_file(self, path: str, mime_type: str, display_name: str) -> StagedFile:
        file = self._client.files.upload(
            file=path,
            config=types.UploadFileConfig(
                mime_type=mime_type,
                display_name=display_name,
            ),
        )
        return self._to_staged(file, mime_type)

    def get_file(self, name: str) -> StagedFile:
        return self._to_staged(self._client.files.get(name=name))

    def delete_file(self, name: str) -> None:
        self._client.files.delete(name=name)
