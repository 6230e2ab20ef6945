"""Map a filesystem change to exactly one sync intent.

``classify`` is a pure function of the event and two configuration values.
It keeps no state between calls, so replaying an event always yields the
same intent.
"""

from typing import assert_never

from songwatch.schemas.sync import (
    ChangeEvent,
    ImportIntent,
    Operation,
    PurgeIntent,
    RejectedIntent,
    RelocateIntent,
    SyncIntent,
)
from songwatch.sync.paths import parent_folder

FOLDER_MOVE_REASON = (
    "forbidden to move folders, only single files of the watched type are relocatable"
)


def classify(event: ChangeEvent, *, trash_marker: str, extension: str) -> SyncIntent:
    """Classify a change event.

    Args:
        event: The filesystem change.
        trash_marker: Substring identifying a trash destination (e.g. ``.Trash``).
            Matched anywhere in the new path, not only as a directory name.
        extension: Watched extension without the dot (e.g. ``mp3``). Matched
            case-sensitively against the old path of a move.

    Returns:
        ImportIntent, RelocateIntent, PurgeIntent or RejectedIntent.
    """
    match event.operation:
        case Operation.CREATED:
            return ImportIntent(folder_path=parent_folder(event.path))
        case Operation.MOVED:
            return _classify_move(event, trash_marker=trash_marker, extension=extension)
        case Operation.REMOVED:
            return PurgeIntent(file_path=event.path)
        case _:
            assert_never(event.operation)


def _classify_move(event: ChangeEvent, *, trash_marker: str, extension: str) -> SyncIntent:
    old_path = event.old_path or ""

    # Moving into the trash is a delete of the original file.
    if trash_marker and trash_marker in event.path:
        return PurgeIntent(file_path=old_path)

    if f".{extension}" not in old_path:
        return RejectedIntent(reason=FOLDER_MOVE_REASON)

    return RelocateIntent(old_file_path=old_path, new_file_path=event.path)
