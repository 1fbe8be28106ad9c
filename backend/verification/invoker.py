import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

from tenacity import Retrying, stop_after_attempt, wait_exponential

from backend.media.models import MediaAttachment
from backend.verification.errors import ModelResponseError
from backend.verification.json_repair import parse_model_json

MAX_ATTEMPTS = 3


class InvokerState(Enum):
    IDLE = "IDLE"
    INVOKING = "INVOKING"
    PARSE_SUCCEEDED = "PARSE_SUCCEEDED"
    PARSE_FAILED = "PARSE_FAILED"
    EXHAUSTED_RETRIES = "EXHAUSTED_RETRIES"


class VerificationInvoker:
    """
    Calls the model and recovers a JSON object from its reply.

    A failed attempt (SDK error or unrecoverable JSON) backs off 1s, then
    2s, for at most MAX_ATTEMPTS attempts; after that the last error is
    re-raised unchanged. One instance serves one verification run at a time.
    """

    def __init__(
        self,
        llm_client,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.llm_client = llm_client
        self.max_attempts = max_attempts
        self.sleep = sleep

        self.state = InvokerState.IDLE
        self.attempt_count = 0
        self.last_error: Optional[BaseException] = None

    def invoke(self, prompt: str, attachment: Optional[MediaAttachment] = None) -> Dict[str, Any]:
        self.state = InvokerState.IDLE
        self.attempt_count = 0
        self.last_error = None

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, exp_base=2),
            sleep=self.sleep,
            before_sleep=self._log_backoff,
            reraise=True,
        )

        try:
            return retrying(self._attempt, prompt, attachment)
        except Exception as e:
            self.state = InvokerState.EXHAUSTED_RETRIES
            print(f"[Invoker] Giving up after {self.attempt_count} attempts: {e}")
            raise

    def _attempt(self, prompt: str, attachment: Optional[MediaAttachment]) -> Dict[str, Any]:
        self.attempt_count += 1
        self.state = InvokerState.INVOKING
        print(f"[Invoker] Attempt {self.attempt_count}/{self.max_attempts} ({self._media_label(attachment)})")

        try:
            text = self.llm_client.generate(prompt, attachment)
            parsed = parse_model_json(text)
        except Exception as e:
            self.state = InvokerState.PARSE_FAILED
            self.last_error = e
            kind = "parse" if isinstance(e, ModelResponseError) else "call"
            print(f"[Invoker] Attempt {self.attempt_count} failed ({kind}): {e}")
            raise

        self.state = InvokerState.PARSE_SUCCEEDED
        print(f"[Invoker] Parsed JSON on attempt {self.attempt_count}")
        return parsed

    @staticmethod
    def _media_label(attachment: Optional[MediaAttachment]) -> str:
        if attachment is None:
            return "text only"
        if attachment.inline_base64 is not None:
            return f"inline {attachment.mime_type}"
        return f"file {attachment.mime_type}"

    @staticmethod
    def _log_backoff(retry_state) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        print(f"[Invoker] Waiting {wait:g}s before retry...")
