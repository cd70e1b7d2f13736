"""Static file serving for the bundled front-end."""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import StaticFileNotFoundError

INDEX_DOCUMENT = "index.html"
DEFAULT_MIME_TYPE = "text/plain"

MIME_TYPES: dict[str, str] = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".md": "text/markdown",
}


def get_mime_type(path: str | Path) -> str:
    """Content type for a file, by extension (case-insensitive)."""
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_static_path(root: Path, url_path: str) -> Path:
    """Map a URL path onto a file under ``root``.

    ``/`` maps to the index document. Paths that would leave ``root`` are
    reported as missing.

    Raises:
        StaticFileNotFoundError: If the path escapes the root.
    """
    relative = url_path.lstrip("/") or INDEX_DOCUMENT
    root = root.resolve()
    candidate = (root / relative).resolve()
    if candidate != root and root not in candidate.parents:
        raise StaticFileNotFoundError(url_path)
    return candidate


def read_static_file(root: Path, url_path: str) -> tuple[bytes, str]:
    """Read a static file and determine its content type.

    Returns:
        ``(content, mime_type)``.

    Raises:
        StaticFileNotFoundError: If the file does not exist.
        OSError: For any other filesystem failure (directories, permissions).
    """
    path = resolve_static_path(root, url_path)
    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        raise StaticFileNotFoundError(url_path) from e
    return content, get_mime_type(path)
