"""Build library request payloads from sync intents."""

from pydantic import ValidationError

from songwatch.errors import ClassificationRejection, SerializationFailure
from songwatch.schemas.sync import (
    HttpVerb,
    ImportBody,
    ImportIntent,
    MoveBody,
    PurgeIntent,
    RejectedIntent,
    RelocateIntent,
    RemoveBody,
    RequestPayload,
    SyncIntent,
)
from songwatch.sync.paths import escape


def build_payload(intent: SyncIntent, *, extension: str) -> RequestPayload:
    """Turn an actionable intent into a wire-ready payload.

    Every path is escaped here, once.

    Raises:
        ClassificationRejection: If the intent is a RejectedIntent.
        SerializationFailure: If the body cannot be built or encoded.
    """
    if isinstance(intent, RejectedIntent):
        raise ClassificationRejection(intent.reason)

    try:
        if isinstance(intent, ImportIntent):
            payload = RequestPayload(
                verb=HttpVerb.POST,
                body=ImportBody(path=escape(intent.folder_path), extension=extension),
            )
        elif isinstance(intent, RelocateIntent):
            payload = RequestPayload(
                verb=HttpVerb.PUT,
                body=MoveBody(
                    new_path=escape(intent.new_file_path),
                    old_path=escape(intent.old_file_path),
                    extension=extension,
                ),
            )
        elif isinstance(intent, PurgeIntent):
            payload = RequestPayload(
                verb=HttpVerb.DELETE,
                body=RemoveBody(path=escape(intent.file_path), extension=extension),
            )
        else:
            raise SerializationFailure(f"Unknown intent type: {type(intent).__name__}")
    except (ValidationError, ValueError, TypeError) as exc:
        raise SerializationFailure(f"Could not encode payload: {exc}") from exc

    return payload
