"""Binary payload substitution for ``<path|path>`` parameter values.

A single archive path is passed through verbatim; anything else is packed into
a fresh ZIP archive.  Archives built here are deterministic: entries are
sorted and carry a fixed timestamp, so the same files always produce the same
bytes.
"""

from __future__ import annotations

import io
import re
import stat
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from contracts.errors import ResolutionError, ResourceError
from project_config import get_section

from .tokens import ArchivePayloadRef

PAYLOAD_PATTERN = re.compile(r"<([^<>]+)>")
PATH_SEPARATOR = "|"

_DEFAULT_ARCHIVE_EXTENSIONS = (".zip", ".jar")
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def archive_extensions() -> Tuple[str, ...]:
    configured = get_section("payload.archive_extensions", default=list(_DEFAULT_ARCHIVE_EXTENSIONS))
    return tuple(str(ext).lower() for ext in configured)


def parse_payload(text: str) -> Optional[ArchivePayloadRef]:
    """Return the payload reference when ``text`` is entirely ``<...>``."""

    match = PAYLOAD_PATTERN.fullmatch(text)
    if match is None:
        return None
    paths = tuple(part.strip() for part in match.group(1).split(PATH_SEPARATOR))
    if any(not part for part in paths):
        raise ResolutionError("payload.empty_path", text)
    return ArchivePayloadRef(paths)


def _resolve_path(raw: str, base_dir: Path) -> Path:
    path = Path(raw)
    if not path.is_absolute():
        path = base_dir / path
    if not path.exists():
        raise ResourceError("payload.not_found", str(path))
    return path


def _entries(path: Path) -> Iterable[Tuple[str, Path]]:
    if path.is_dir():
        for child in sorted(path.rglob("*")):
            if child.is_file():
                yield child.relative_to(path).as_posix(), child
    else:
        yield path.name, path


def build_archive(paths: Iterable[Path]) -> bytes:
    """Pack ``paths`` into an in-memory ZIP archive and return its bytes."""

    entries: Dict[str, Path] = {}
    for path in paths:
        for name, source in _entries(path):
            if name in entries:
                raise ResourceError("payload.duplicate_entry", name)
            entries[name] = source

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name in sorted(entries):
            source = entries[name]
            info = zipfile.ZipInfo(name, date_time=_ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = (stat.S_IFREG | stat.S_IMODE(source.stat().st_mode)) << 16
            archive.writestr(info, source.read_bytes())
    return buffer.getvalue()


def materialise(ref: ArchivePayloadRef, base_dir: Path | None = None) -> bytes:
    """Return the bytes that replace the string hosting ``ref``."""

    root = base_dir if base_dir is not None else Path.cwd()
    try:
        resolved: List[Path] = [_resolve_path(raw, root) for raw in ref.paths]
        if len(resolved) == 1 and resolved[0].is_file() and resolved[0].suffix.lower() in archive_extensions():
            return resolved[0].read_bytes()
        return build_archive(resolved)
    except OSError as exc:
        raise ResourceError("payload.unreadable", f"{exc.filename or ''}: {exc.strerror or exc}") from exc


__all__ = ["archive_extensions", "build_archive", "materialise", "parse_payload"]
