"""Schemas for the library sync pipeline.

Covers the per-event lifecycle:
  filesystem change → sync intent → request payload → dispatch result
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Operation(StrEnum):
    """Filesystem operations the watcher forwards to the dispatcher."""

    CREATED = "created"
    MOVED = "moved"
    REMOVED = "removed"


class HttpVerb(StrEnum):
    """HTTP method used for each kind of library request."""

    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class DispatchStatus(StrEnum):
    """Outcome of dispatching a single change event."""

    SENT = "sent"
    PLANNED = "planned"
    REJECTED = "rejected"
    FAILED = "failed"


# --- Watcher output ---


class ChangeEvent(BaseModel):
    """A single filesystem observation inside the watched tree.

    A bare root separator is never a valid target, so every path must be
    longer than one character. ``old_path`` is present only for moves.
    """

    model_config = ConfigDict(frozen=True)

    operation: Operation
    path: str = Field(min_length=2)
    old_path: str | None = Field(default=None, min_length=2)
    is_directory: bool = False

    @model_validator(mode="after")
    def _check_old_path(self) -> "ChangeEvent":
        if self.operation == Operation.MOVED and self.old_path is None:
            raise ValueError("old_path is required for moved events")
        if self.operation != Operation.MOVED and self.old_path is not None:
            raise ValueError(f"old_path is only valid for moved events, not {self.operation}")
        return self


# --- Classifier output ---


class ImportIntent(BaseModel):
    """A new file appeared; the library should rescan its folder."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["import"] = "import"
    folder_path: str


class RelocateIntent(BaseModel):
    """A watched file was renamed or moved within the tree."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["relocate"] = "relocate"
    old_file_path: str
    new_file_path: str


class PurgeIntent(BaseModel):
    """A watched file was deleted or moved into the trash."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["purge"] = "purge"
    file_path: str


class RejectedIntent(BaseModel):
    """The event cannot be mapped to a library request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    reason: str


SyncIntent = Annotated[
    ImportIntent | RelocateIntent | PurgeIntent | RejectedIntent,
    Field(discriminator="kind"),
]


# --- Wire bodies ---


class ImportBody(BaseModel):
    """POST body asking the library to import a folder."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    recursive: bool = True
    extension: str = Field(alias="songExtension")
    genre_from_path: bool = Field(default=True, alias="genreFromPath")


class MoveBody(BaseModel):
    """PUT body relocating a single file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    new_path: str = Field(alias="newPath")
    old_path: str = Field(alias="oldPath")
    recursive: bool = False
    extension: str = Field(alias="songExtension")


class RemoveBody(BaseModel):
    """DELETE body removing a single file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    recursive: bool = False
    extension: str = Field(alias="songExtension")
    genre_from_path: bool = Field(default=False, alias="genreFromPath")


class RequestPayload(BaseModel):
    """A wire-ready library request: the verb plus its JSON body."""

    model_config = ConfigDict(frozen=True)

    verb: HttpVerb
    body: ImportBody | MoveBody | RemoveBody

    def to_dict(self) -> dict:
        """Return the body with its wire field names."""
        return self.body.model_dump(by_alias=True)

    def to_json(self) -> bytes:
        """Encode the body as the JSON document sent to the library."""
        return self.body.model_dump_json(by_alias=True).encode()


# --- Dispatcher output (in-memory only) ---


class DispatchResult(BaseModel):
    """What happened to a single change event. Logged, never persisted."""

    timestamp: datetime
    event: ChangeEvent
    intent: SyncIntent
    payload: RequestPayload | None = None
    status: DispatchStatus
    error_message: str = Field(default="", description="Error details if status is not sent")
