from datetime import datetime
from typing import Optional

from backend.context.gatherer import ContextGatherer
from backend.media.fetcher import MediaFetcher
from backend.media.mime import image_mime_type, video_mime_type
from backend.media.models import MediaAttachment, StagedFile
from backend.media.stager import VideoStager
from backend.verification.invoker import VerificationInvoker
from backend.verification.models import VerificationResult
from backend.verification.normalizer import normalize_verdict
from backend.verification.prompt_builder import build_prompt, precheck_lighting


class ContentVerifier:
    """
    Orchestrates context -> media -> prompt -> model (with retry) -> normalized result.

    Raises on media failure, staging failure or retry exhaustion. A staged
    video is deleted exactly once, whatever the outcome.
    """

    def __init__(
        self,
        context_gatherer: ContextGatherer,
        fetcher: MediaFetcher,
        stager: VideoStager,
        invoker: VerificationInvoker,
    ):
        self.context_gatherer = context_gatherer
        self.fetcher = fetcher
        self.stager = stager
        self.invoker = invoker

    def verify(
        self,
        description: Optional[str],
        file_url: str,
        file_type: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        capture_date: Optional[datetime] = None,
    ) -> VerificationResult:
        print(f"[Verifier] Verifying {file_type} at {file_url}")

        snapshot = self.context_gatherer.gather(latitude, longitude, capture_date)
        issues, factors = precheck_lighting(description, snapshot)
        if issues:
            print(f"[Verifier] {len(issues)} pre-verification alert(s)")

        staged: Optional[StagedFile] = None
        try:
            attachment: Optional[MediaAttachment] = None
            if file_type == "image":
                attachment = MediaAttachment.inline(
                    self.fetcher.fetch_base64(file_url),
                    image_mime_type(file_url),
                )
            elif file_type == "video":
                mime_type = video_mime_type(file_url)
                staged = self.stager.stage(file_url, mime_type)
                attachment = MediaAttachment.reference(staged, mime_type)

            prompt = build_prompt(description, snapshot, issues, file_type)
            parsed = self.invoker.invoke(prompt, attachment)
        finally:
            if staged is not None:
                self.stager.delete(staged)

        result = normalize_verdict(parsed, issues, factors, file_type)
        print(f"[Verifier] Status: {result.status.value} ({len(result.issues)} issue(s))")
        return result
