import os
import tempfile
import time
from typing import Callable, Optional

from backend.media.fetcher import MediaFetcher
from backend.media.mime import file_extension, video_mime_type
from backend.media.models import StagedFile
from backend.verification.errors import RemoteFileProcessingError, RemoteFileTimeoutError

POLL_INTERVAL_SECONDS = 1.0
PROCESSING_TIMEOUT_SECONDS = 30.0


class VideoStager:
    """
    Stages a video in the provider's file storage so the model can read it
    by reference.

    The caller owns the returned StagedFile and must call delete() exactly
    once. If staging itself fails after the remote file was created, the
    remote file is deleted here before the error propagates.
    """

    def __init__(
        self,
        llm_client,
        fetcher: MediaFetcher,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        timeout: float = PROCESSING_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.llm_client = llm_client
        self.fetcher = fetcher
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.sleep = sleep
        self.clock = clock

    def stage(self, video_url: str, mime_type: Optional[str] = None) -> StagedFile:
        mime_type = mime_type or video_mime_type(video_url)
        data = self.fetcher.download(video_url)
        print(f"[VideoStager] Downloaded {len(data) / 1024 / 1024:.2f} MB ({mime_type})")

        suffix = "." + (file_extension(video_url) or "mp4")
        with tempfile.TemporaryDirectory(prefix="seen-video-") as tmp_dir:
            tmp_path = os.path.join(tmp_dir, f"upload{suffix}")
            with open(tmp_path, "wb") as fh:
                fh.write(data)

            try:
                staged = self.llm_client.upload_file(
                    tmp_path,
                    mime_type=mime_type,
                    display_name=f"verification-video-{int(time.time() * 1000)}",
                )
            except Exception as e:
                raise RemoteFileProcessingError(f"Video upload failed: {e}") from e
            print(f"[VideoStager] Uploaded {staged.name} (state={staged.state})")

            try:
                staged = self._wait_until_active(staged)
            except Exception:
                self.delete(staged)
                raise

        if not staged.mime_type:
            staged.mime_type = mime_type
        return staged

    def _wait_until_active(self, staged: StagedFile) -> StagedFile:
        started = self.clock()
        while staged.state == "PROCESSING":
            if self.clock() - started > self.timeout:
                raise RemoteFileTimeoutError(
                    f"Video processing timeout - file did not become active within {self.timeout:g} seconds"
                )
            self.sleep(self.poll_interval)
            try:
                staged = self.llm_client.get_file(staged.name)
            except Exception as e:
                raise RemoteFileProcessingError(f"Video status check failed: {e}") from e

        if staged.state != "ACTIVE":
            raise RemoteFileProcessingError(f"Video file failed to process. State: {staged.state}")

        print(f"[VideoStager] {staged.name} is ACTIVE")
        return staged

    def delete(self, staged: StagedFile) -> None:
        try:
            self.llm_client.delete_file(staged.name)
            print(f"[VideoStager] Deleted remote file {staged.name}")
        except Exception as e:
            # A leaked remote file must not mask the verification outcome
            print(f"[VideoStager] Failed to delete remote file {staged.name}: {e}")
