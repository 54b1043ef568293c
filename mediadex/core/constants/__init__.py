"""
Constants Module

Contains application constants:
- Reserved system marker files
- Hidden entry marker
- Category families and eager content prefixes
- Extension to content-type additions
"""

# Sidecar files written by file managers; never media.
SYSTEM_MARKER_FILES = frozenset({
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
})

HIDDEN_MARKER = "."

UNKNOWN_LABEL = "unknown"

EXCLUDED_FAMILIES = ("application/",)

# Categories whose bytes are read during the scan.
EAGER_CONTENT_PREFIXES = ("image/",)

# Extensions missing from the interpreter's built-in mimetypes table.
EXTRA_CONTENT_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".aiff": "audio/x-aiff",
    ".aif": "audio/x-aiff",
    ".md": "text/markdown",
}

CONFIG_FILENAME = "config.json"
LOG_FILENAME = "mediadex.log"
