"""Resource manifest entries and the helpers that build and validate them."""

from __future__ import annotations

import os
import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

PathLike = Union[str, "os.PathLike[str]"]

_HEX_DIGITS = frozenset(string.hexdigits)


class ManifestError(ValueError):
    """Raised when a resource manifest or one of its entries is invalid."""


class ResourceKind(Enum):
    """How a resource is obtained."""

    EMBED = "embed"
    EMBEDDIR = "embeddir"
    FS = "fs"
    TXT = "txt"
    BIN = "bin"
    DIR = "dir"

    @classmethod
    def parse(cls, text: str) -> Optional["ResourceKind"]:
        """Return the kind named by ``text``, or None if the name is unknown."""
        try:
            return cls(text)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResourceEntry:
    """One resource to register under a logical path.

    ``source`` is the file or directory the data comes from (embed, fs, dir),
    ``text`` the inline text (txt) and ``data`` the inline bytes (bin).
    """

    logical_path: str
    kind: ResourceKind
    source: Optional[str] = None
    text: Optional[str] = None
    data: Optional[bytes] = None


def validate_segment(segment: str) -> None:
    """Check that a logical path segment is non-empty and has no '/'."""
    if not segment:
        raise ManifestError("resource!: path segment must not be empty")
    if "/" in segment:
        raise ManifestError("resource!: path segment must not contain '/'")


def parse_hex_byte_blob(text: str) -> bytes:
    """Parse whitespace-separated two-digit hex bytes such as ``"00 ff 7a"``."""
    out = bytearray()
    for token in text.split():
        if token.startswith(("0x", "0X")):
            raise ManifestError(
                "resource!: bin bytes must not carry a 0x prefix "
                f"(expected two hex digits such as ff), got: {token}"
            )
        if len(token) != 2:
            raise ManifestError(
                f"resource!: bin bytes must be two hex digits (00..ff), got: {token}"
            )
        if not all(ch in _HEX_DIGITS for ch in token):
            raise ManifestError(
                f"resource!: bin bytes must be hexadecimal (00..ff), got: {token}"
            )
        out.append(int(token, 16))

    if not out:
        raise ManifestError(
            "resource!: bin content must not be empty "
            "(at least one byte is needed, e.g. 00 ff 7a)"
        )
    return bytes(out)


def _is_empty_dir(path: PathLike) -> bool:
    return os.fspath(path) in ("", ".")


def resolve_from_for_yaml_file(source: str, yaml_dir: Optional[PathLike]) -> str:
    """Prefix a relative ``source`` with the directory of the manifest file.

    Absolute sources, a missing manifest directory and an empty manifest
    directory leave ``source`` unchanged.
    """
    if yaml_dir is None:
        return source
    if Path(source).is_absolute():
        return source
    if _is_empty_dir(yaml_dir):
        return source
    return str(Path(yaml_dir) / source)


def resolve_callsite_path(callsite_dir: PathLike, path: PathLike) -> Path:
    """Resolve ``path`` against ``callsite_dir`` unless it is absolute."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path(callsite_dir) / candidate


def collect_files_recursively(root: PathLike) -> list[Path]:
    """List every regular file below ``root`` as a path relative to it.

    Symbolic links are skipped. The result is sorted by its string form.
    """
    root_path = Path(root)
    found: list[Path] = []

    def walk(directory: Path) -> None:
        try:
            entries = list(os.scandir(directory))
        except OSError as err:
            raise ManifestError(
                f"resource!: embeddir cannot read directory: {directory} ({err})"
            ) from err

        for entry in entries:
            path = Path(entry.path)
            try:
                if entry.is_symlink():
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as err:
                raise ManifestError(
                    f"resource!: embeddir cannot read metadata: {path} ({err})"
                ) from err

            if is_dir:
                walk(path)
            elif is_file:
                try:
                    found.append(path.relative_to(root_path))
                except ValueError as err:
                    raise ManifestError(
                        "resource!: embeddir internal error: cannot compute relative "
                        f"path: root={root_path} file={path}"
                    ) from err

    walk(root_path)
    found.sort(key=str)
    return found


def _segments_of(relative: Path) -> Iterable[str]:
    for part in relative.parts:
        if part in ("", ".", "..") or part == relative.anchor:
            raise ManifestError(
                f"resource!: embeddir found an invalid relative path: {relative}"
            )
        try:
            part.encode("utf-8")
        except UnicodeEncodeError as err:
            raise ManifestError(
                f"resource!: embeddir file name is not UTF-8: {relative!s}"
            ) from err
        validate_segment(part)
        yield part


def expand_embeddir_entries(
    callsite_dir: PathLike,
    yaml_dir: Optional[PathLike],
    prefix: Sequence[str],
    name: str,
    source: str,
) -> list[ResourceEntry]:
    """Turn an ``embeddir`` node into one ``embed`` entry per file in the directory."""
    if not source.strip():
        raise ManifestError(f"resource!: {name}: embeddir requires a from field")

    include_root = resolve_from_for_yaml_file(source, yaml_dir)
    root_abs = resolve_callsite_path(callsite_dir, include_root)

    if not root_abs.exists():
        raise ManifestError(
            f"resource!: {name}: embeddir directory does not exist: {root_abs} "
            f"(from: {include_root})"
        )
    if not root_abs.is_dir():
        raise ManifestError(
            f"resource!: {name}: embeddir from must point to a directory: {root_abs} "
            f"(from: {include_root})"
        )

    entries: list[ResourceEntry] = []
    for relative in collect_files_recursively(root_abs):
        segments = [*prefix, name, *_segments_of(relative)]
        entries.append(
            ResourceEntry(
                logical_path="/".join(segments),
                kind=ResourceKind.EMBED,
                source=str(Path(include_root) / relative),
            )
        )
    return entries