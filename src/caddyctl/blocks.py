import logging
import re
from pathlib import Path
from typing import NamedTuple

from caddyctl.errors import ConflictError

logger = logging.getLogger(__name__)

BLOCK_TEMPLATE = "{host} {{\n\timport common\n\treverse_proxy {upstream}\n}}\n"

_UPSTREAM_RE = re.compile(r"reverse_proxy\s+([^\s}]+)")


class BlockMatch(NamedTuple):
    start: int
    end: int
    host: str
    body: str


class UpsertOutcome(NamedTuple):
    content: str
    action: str  # "added" or "replaced"
    span: tuple[int, int]


def render_block(host: str, upstream: str) -> str:
    return BLOCK_TEMPLATE.format(host=host, upstream=upstream)


def _block_pattern(host: str) -> re.Pattern[str]:
    # Header line is "<host> {" alone; the body runs to the first line holding only "}".
    # Trailing blanks and CR are tolerated on both lines.
    return re.compile(
        r"^" + re.escape(host) + r"[ \t]*\{[ \t]*(?=\r?\n)(.*?)\r?\n\}[ \t]*\r?(?:\n|\Z)",
        re.MULTILINE | re.DOTALL,
    )


def find_block(text: str, host: str) -> BlockMatch | None:
    match = _block_pattern(host).search(text)
    if match:
        return BlockMatch(
            start=match.start(),
            end=match.end(),
            host=host,
            body=match.group(1),
        )
    return None


def upstream_in_use(text: str, upstream: str) -> bool:
    """Return True when some ``reverse_proxy`` directive already targets ``upstream``.

    Exact string comparison only: ``10.0.0.5`` and ``10.0.0.5:8080`` are
    different upstreams as far as this check is concerned.
    """
    return any(token == upstream for token in _UPSTREAM_RE.findall(text))


def append_block(text: str, block: str) -> str:
    trimmed = text.rstrip("\n")
    if not trimmed:
        return block
    return trimmed + "\n\n" + block


def upsert_block(text: str, host: str, upstream: str, *, force: bool = False, path: Path | None = None) -> UpsertOutcome:
    """Insert or replace the block for ``host`` and return the new text.

    Raises ConflictError when a block for ``host`` exists and ``force`` is
    not set. ``path`` is only used to give the error some context.
    """
    desired = render_block(host, upstream)

    existing = find_block(text, host)
    if existing:
        if not force:
            where = f" in {path}" if path is not None else ""
            raise ConflictError(
                f"entry for host {host!r} already exists{where} (use --force to replace it)",
                path=path,
                host=host,
            )
        logger.debug("replacing block for %s at [%d, %d)", host, existing.start, existing.end)
        new_text = text[:existing.start] + desired + text[existing.end:]
        return UpsertOutcome(new_text, "replaced", (existing.start, existing.start + len(desired)))

    new_text = append_block(text, desired)
    logger.debug("appending block for %s", host)
    return UpsertOutcome(new_text, "added", (len(new_text) - len(desired), len(new_text)))
