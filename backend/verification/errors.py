class VerificationError(Exception):
    """Base class for failures raised by the verification pipeline."""

    kind = "verification_error"


class MediaFetchError(VerificationError):
    kind = "media_fetch"


class RemoteFileProcessingError(VerificationError):
    kind = "remote_file_processing"


class RemoteFileTimeoutError(RemoteFileProcessingError):
    kind = "remote_file_timeout"


class ModelResponseError(VerificationError):
    """The model replied, but no JSON object could be recovered from the text."""

    kind = "model_response"


class UploadNotFoundError(VerificationError):
    kind = "not_found"


class PersistenceError(VerificationError):
    """Writing the outcome back failed; the verification itself may have succeeded."""

    kind = "persistence"


def error_kind(exc: BaseException) -> str:
    if isinstance(exc, VerificationError):
        return exc.kind
    # Model/SDK errors surface untyped after retry exhaustion
    return "model_invocation"
