"""Label files: path resolution, validation and the upsert cycle."""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from caddyctl.blocks import upsert_block, upstream_in_use
from caddyctl.config import Settings, normalize_extension
from caddyctl.errors import ConflictError, InvalidNameError, NotFoundError, StoreIOError

logger = logging.getLogger(__name__)

_HOST_RE = re.compile(r"[a-z0-9.-]+")
_UPSTREAM_FORBIDDEN = re.compile(r"[\s{}]")


@dataclass(frozen=True)
class EntryResult:
    """Outcome of a new-entry invocation."""

    path: Path
    host: str
    upstream: str
    action: str
    duplicate_upstream: bool
    old_content: str
    new_content: str


def is_safe_filename(name: str) -> bool:
    """Reject empty names, path separators, NUL and control characters."""
    if not name:
        return False
    for ch in name:
        if ch in ("/", "\\", "\0") or unicodedata.category(ch) == "Cc":
            return False
    return True


def validate_label(label: str) -> None:
    if not is_safe_filename(label):
        raise InvalidNameError(f"invalid label {label!r} (forbidden: path separators or control chars)")


def validate_host(host: str) -> None:
    if not _HOST_RE.fullmatch(host):
        raise InvalidNameError(f"invalid host {host!r} (allowed: a-z, 0-9, '.', '-')")


def validate_upstream(upstream: str) -> None:
    if not upstream.strip():
        raise InvalidNameError("upstream is required (ex: 10.10.0.20 or 10.10.0.20:3002)")
    if _UPSTREAM_FORBIDDEN.search(upstream):
        raise InvalidNameError(f"invalid upstream {upstream!r} (whitespace and braces are not allowed)")


def _file_ext(name: str) -> str:
    # Everything from the last dot, so ".caddy" is its own extension.
    dot = name.rfind(".")
    return name[dot:] if dot != -1 else ""


def label_path(label: str, directory: Path, extension: str) -> Path:
    """Build ``<directory>/<label><extension>`` without doubling the extension."""
    ext = normalize_extension(extension)
    filename = label if _file_ext(label) == ext else label + ext
    return Path(directory) / filename


def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StoreIOError(f"unable to create directory {str(path)!r}: {e}") from e


def read_all(path: Path) -> str:
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise NotFoundError(path) from e
    except OSError as e:
        raise StoreIOError(f"failed to read file {path}: {e}") from e
    # Bytes round-trip untouched; no newline translation.
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StoreIOError(f"file {path} is not valid UTF-8: {e}") from e


def write_all(path: Path, text: str) -> None:
    try:
        path.write_bytes(text.encode("utf-8"))
    except OSError as e:
        raise StoreIOError(f"failed to write file {path}: {e}") from e


def create_label(label: str, settings: Settings) -> Path:
    """Create an empty label file, truncating an existing one only with force."""
    validate_label(label)
    ensure_dir(settings.directory)
    path = label_path(label, settings.directory, settings.extension)

    try:
        exists = path.exists()
    except OSError as e:
        raise StoreIOError(f"error checking file {path}: {e}") from e
    if exists and not settings.force:
        raise ConflictError(f"file already exists: {path} (use --force to overwrite)", path=path)

    write_all(path, "")
    logger.debug("label file %s %s", path, "truncated" if exists else "created")
    return path


def load_or_create(path: Path, *, create: bool = True) -> str:
    """Return file content; a missing file reads as empty and is created unless ``create`` is off."""
    try:
        return read_all(path)
    except NotFoundError:
        if create:
            write_all(path, "")
            logger.debug("created empty label file %s", path)
        return ""


def add_entry(
    label: str,
    host: str,
    upstream: str,
    settings: Settings,
    *,
    dry_run: bool = False,
    on_duplicate: Callable[[Path, str], None] | None = None,
) -> EntryResult:
    """Add or replace the ``host`` block in the label file.

    A missing label file is created empty before the conflict check and is
    left in place if that check fails. With ``dry_run`` nothing touches the
    disk; the result carries the content that would have been written.

    ``on_duplicate`` is called with the path and upstream before the block is
    written when another directive already targets the same upstream.
    """
    validate_label(label)
    validate_host(host)
    validate_upstream(upstream)

    if not dry_run:
        ensure_dir(settings.directory)
    path = label_path(label, settings.directory, settings.extension)
    logger.debug("label %s resolved to %s", label, path)

    content = load_or_create(path, create=not dry_run)
    duplicate = upstream_in_use(content, upstream)
    if duplicate and on_duplicate is not None:
        on_duplicate(path, upstream)

    outcome = upsert_block(content, host, upstream, force=settings.force, path=path)
    if not dry_run:
        write_all(path, outcome.content)

    return EntryResult(
        path=path,
        host=host,
        upstream=upstream,
        action=outcome.action,
        duplicate_upstream=duplicate,
        old_content=content,
        new_content=outcome.content,
    )
