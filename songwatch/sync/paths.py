"""Path normalisation for library request payloads.

Paths are plain POSIX strings as reported by the watcher. Both helpers are
pure and never fail.
"""

SEPARATOR = "/"

# The library runs paths through quote-sensitive processing; it expects
# each single quote preceded by two literal backslashes.
ESCAPED_QUOTE = "\\\\'"


def parent_folder(path: str) -> str:
    """Return the folder containing ``path``.

    ``/music/Artist/song.mp3`` becomes ``/music/Artist``. A file directly at
    the root (``/song.mp3``) yields ``""``, which the library reads as the
    watch root.
    """
    segments = path.split(SEPARATOR)
    folder = ""
    for segment in segments[1:-1]:
        folder += SEPARATOR + segment
    return folder


def escape(path: str) -> str:
    """Escape single quotes. Apply exactly once, right before building a payload."""
    return path.replace("'", ESCAPED_QUOTE)
