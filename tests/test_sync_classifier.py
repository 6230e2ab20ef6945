"""Tests for change event classification."""

import pytest
from pydantic import ValidationError

from songwatch.schemas.sync import (
    ChangeEvent,
    ImportIntent,
    Operation,
    PurgeIntent,
    RejectedIntent,
    RelocateIntent,
)
from songwatch.sync.classifier import FOLDER_MOVE_REASON, classify


def _classify(event: ChangeEvent):
    return classify(event, trash_marker=".Trash", extension="mp3")


def _moved(old: str, new: str, **kwargs) -> ChangeEvent:
    return ChangeEvent(operation=Operation.MOVED, path=new, old_path=old, **kwargs)


# ------------------------------------------------------------------
# Created
# ------------------------------------------------------------------


class TestCreated:
    @pytest.mark.parametrize(
        "path",
        ["/lib/NewAlbum/01.mp3", "/song.mp3", "/lib/.Trash/x.mp3", "/lib/notes.txt", "/a"],
    )
    def test_always_imports(self, path):
        intent = _classify(ChangeEvent(operation=Operation.CREATED, path=path))
        assert isinstance(intent, ImportIntent)

    def test_imports_parent_folder(self):
        intent = _classify(ChangeEvent(operation=Operation.CREATED, path="/lib/NewAlbum/01.mp3"))
        assert intent == ImportIntent(folder_path="/lib/NewAlbum")

    def test_root_level_file_imports_root(self):
        intent = _classify(ChangeEvent(operation=Operation.CREATED, path="/song.mp3"))
        assert intent.folder_path == ""


# ------------------------------------------------------------------
# Moved
# ------------------------------------------------------------------


class TestMoved:
    def test_rename_within_tree_relocates(self):
        intent = _classify(_moved("/lib/A/song.mp3", "/lib/B/song.mp3"))
        assert intent == RelocateIntent(
            old_file_path="/lib/A/song.mp3", new_file_path="/lib/B/song.mp3"
        )

    def test_move_to_trash_purges_old_path(self):
        intent = _classify(_moved("/lib/A/song.mp3", "/lib/.Trash/song.mp3"))
        assert intent == PurgeIntent(file_path="/lib/A/song.mp3")

    @pytest.mark.parametrize("old", ["/lib/A", "/lib/A/cover.jpg", "/lib/A/song.MP3"])
    def test_move_to_trash_ignores_old_extension(self, old):
        intent = _classify(_moved(old, "/home/me/.Trash/whatever"))
        assert intent == PurgeIntent(file_path=old)

    def test_folder_move_rejected(self):
        intent = _classify(_moved("/lib/OldAlbum", "/lib/NewAlbum", is_directory=True))
        assert intent == RejectedIntent(reason=FOLDER_MOVE_REASON)

    def test_extension_check_is_case_sensitive(self):
        intent = _classify(_moved("/lib/A/SONG.MP3", "/lib/B/SONG.MP3"))
        assert isinstance(intent, RejectedIntent)

    def test_trash_marker_matches_anywhere(self):
        # Substring match, not a directory component match
        intent = _classify(_moved("/lib/A/song.mp3", "/lib/My.Trashy Hits/song.mp3"))
        assert intent == PurgeIntent(file_path="/lib/A/song.mp3")

    def test_custom_extension_and_marker(self):
        event = _moved("/lib/A/track.flac", "/lib/Recycle Bin/track.flac")
        assert classify(event, trash_marker="Recycle Bin", extension="flac") == PurgeIntent(
            file_path="/lib/A/track.flac"
        )
        event = _moved("/lib/A/track.flac", "/lib/B/track.flac")
        assert isinstance(classify(event, trash_marker="Recycle Bin", extension="flac"), RelocateIntent)


# ------------------------------------------------------------------
# Removed
# ------------------------------------------------------------------


class TestRemoved:
    def test_purges_path(self):
        intent = _classify(ChangeEvent(operation=Operation.REMOVED, path="/lib/A/song.mp3"))
        assert intent == PurgeIntent(file_path="/lib/A/song.mp3")


class TestDeterminism:
    def test_same_event_same_intent(self):
        event = _moved("/lib/A/song.mp3", "/lib/B/song.mp3")
        assert _classify(event) == _classify(event)

    def test_history_does_not_matter(self):
        removed = ChangeEvent(operation=Operation.REMOVED, path="/lib/A/song.mp3")
        created = ChangeEvent(operation=Operation.CREATED, path="/lib/A/song.mp3")
        first = _classify(created)
        _classify(removed)
        assert _classify(created) == first


class TestChangeEventValidation:
    def test_bare_root_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEvent(operation=Operation.CREATED, path="/")

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEvent(operation=Operation.REMOVED, path="")

    def test_moved_requires_old_path(self):
        with pytest.raises(ValidationError):
            ChangeEvent(operation=Operation.MOVED, path="/lib/B/song.mp3")

    def test_old_path_only_for_moves(self):
        with pytest.raises(ValidationError):
            ChangeEvent(operation=Operation.CREATED, path="/lib/a.mp3", old_path="/lib/b.mp3")

    def test_moved_old_path_root_rejected(self):
        with pytest.raises(ValidationError):
            _moved("/", "/lib/B/song.mp3")

    def test_events_are_immutable(self):
        event = ChangeEvent(operation=Operation.CREATED, path="/lib/a.mp3")
        with pytest.raises(ValidationError):
            event.path = "/lib/b.mp3"
