"""Loading resource manifests (YAML) and registering their resources."""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import yaml

from jungle.entries import (
    ManifestError,
    ResourceEntry,
    ResourceKind,
    expand_embeddir_entries,
    parse_hex_byte_blob,
    resolve_callsite_path,
    resolve_from_for_yaml_file,
    validate_segment,
)

PathLike = Union[str, "os.PathLike[str]"]

SILENCE_ENV_VAR = "JUNGLE_RESOURCE_EMBEDDIR_SILENCE"

EMBEDDIR_NOTICE = (
    "resource manifest uses embeddir. Files added to or removed from an embeddir "
    "directory are picked up only when the manifest is loaded again. "
    f"Set {SILENCE_ENV_VAR}=1 to silence this notice."
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def env_truthy(name: str) -> bool:
    """Return True if the environment variable ``name`` holds 1/true/yes/on."""
    value = os.environ.get(name)
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def looks_like_yaml_path(text: str) -> bool:
    """Return True if ``text`` names a .yaml or .yml file."""
    stripped = text.strip()
    return stripped.endswith(".yaml") or stripped.endswith(".yml")


def read_manifest_source(
    raw: str, callsite_dir: PathLike
) -> tuple[str, Optional[Path]]:
    """Return the YAML text and the manifest directory for ``raw``.

    If ``raw`` looks like a .yaml/.yml path it is read from disk (relative
    paths resolve against ``callsite_dir``) and the second item is the
    directory that embed sources are relative to. Otherwise ``raw`` is
    itself the YAML text and the second item is None.
    """
    if not looks_like_yaml_path(raw):
        return raw, None

    path = Path(raw)
    resolved = path if path.is_absolute() else Path(callsite_dir) / path

    if not resolved.exists():
        raise ManifestError(
            f"resource!: YAML file does not exist: {raw}\nresolved path: {resolved}"
        )

    try:
        source = resolved.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ManifestError(
            f"resource!: cannot read YAML file: {raw}\n"
            f"resolved path: {resolved}\nerror: {err}"
        ) from err

    yaml_dir = resolved.parent if path.is_absolute() else path.parent
    return source, yaml_dir


@dataclass(frozen=True)
class Manifest:
    """A parsed resource manifest.

    ``callsite_dir`` is the directory that embed sources resolve against.
    """

    entries: tuple[ResourceEntry, ...]
    callsite_dir: Path
    used_embeddir: bool = False

    def __iter__(self) -> Iterator[ResourceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def logical_paths(self) -> list[str]:
        """Logical paths of all entries, in manifest order."""
        return [entry.logical_path for entry in self.entries]


class _ManifestParser:
    def __init__(self, callsite_dir: Path, yaml_dir: Optional[PathLike]) -> None:
        self.callsite_dir = callsite_dir
        self.yaml_dir = yaml_dir
        self.entries: list[ResourceEntry] = []
        self.used_embeddir = False

    def parse_root(self, document: Any) -> None:
        if not isinstance(document, list):
            raise ManifestError(
                "resource!: the YAML top level must be a list (a '-' sequence)"
            )
        prefix: list[str] = []
        for node in document:
            self.parse_node(node, prefix)

    def parse_node(self, node: Any, prefix: list[str]) -> None:
        if not isinstance(node, dict):
            raise ManifestError(
                "resource!: every list element must be a map (directory or resource node)"
            )

        if len(node) == 1:
            ((key, value),) = node.items()
            if isinstance(key, str) and isinstance(value, list):
                validate_segment(key)
                prefix.append(key)
                try:
                    for child in value:
                        self.parse_node(child, prefix)
                finally:
                    prefix.pop()
                return

        self.parse_resource(node, prefix)

    def parse_resource(self, node: dict, prefix: list[str]) -> None:
        name: Optional[str] = None
        kind: Optional[ResourceKind] = None
        source: Optional[str] = None
        text: Optional[str] = None
        data: Optional[bytes] = None

        for key, value in node.items():
            if not isinstance(key, str):
                continue
            if key == "from":
                source = value if isinstance(value, str) else None
            elif key == "txt":
                if not isinstance(value, str):
                    raise ManifestError(
                        "resource!: the txt field must be a YAML string (use a `|` block scalar)"
                    )
                text = value
            elif key == "bin":
                if not isinstance(value, str):
                    raise ManifestError(
                        "resource!: the bin field must be a YAML string (use a `|` block scalar)"
                    )
                data = parse_hex_byte_blob(value)
            else:
                if name is not None:
                    raise ManifestError(
                        "resource!: a resource node may hold only one resource name key "
                        "(besides from/txt/bin)"
                    )
                if not isinstance(value, str):
                    raise ManifestError(
                        "resource!: the resource kind must be a string "
                        f"(embed/embeddir/fs/txt/bin/dir), but the value of {key} is not"
                    )
                parsed = ResourceKind.parse(value)
                if parsed is None:
                    raise ManifestError(
                        f"resource!: unknown resource kind: {value} "
                        "(only embed/embeddir/fs/txt/bin/dir are supported)"
                    )
                validate_segment(key)
                name = key
                kind = parsed

        if name is None or kind is None:
            raise ManifestError(
                "resource!: resource node has no resource name (for example: - foo.png: embed)"
            )

        if kind is ResourceKind.EMBED and source is not None:
            source = resolve_from_for_yaml_file(source, self.yaml_dir)

        if kind in (ResourceKind.EMBED, ResourceKind.FS, ResourceKind.DIR):
            self._require(not source, f"{name}: {kind} requires a from field")
            self._require(text is not None, f"{name}: {kind} does not allow a txt field")
            self._require(data is not None, f"{name}: {kind} does not allow a bin field")
        elif kind is ResourceKind.EMBEDDIR:
            self.used_embeddir = True
            self._require(not source, f"{name}: embeddir requires a from field")
            self._require(text is not None, f"{name}: embeddir does not allow a txt field")
            self._require(data is not None, f"{name}: embeddir does not allow a bin field")
            assert source is not None
            self.entries.extend(
                expand_embeddir_entries(
                    self.callsite_dir, self.yaml_dir, prefix, name, source
                )
            )
            return
        elif kind is ResourceKind.TXT:
            self._require(not text, f"{name}: txt requires a txt field")
            self._require(source is not None, f"{name}: txt does not allow a from field")
            self._require(data is not None, f"{name}: txt does not allow a bin field")
        elif kind is ResourceKind.BIN:
            self._require(not data, f"{name}: bin requires a bin field")
            self._require(source is not None, f"{name}: bin does not allow a from field")
            self._require(text is not None, f"{name}: bin does not allow a txt field")

        self.entries.append(
            ResourceEntry(
                logical_path="/".join([*prefix, name]),
                kind=kind,
                source=source,
                text=text,
                data=data,
            )
        )

    @staticmethod
    def _require(failed: bool, message: str) -> None:
        if failed:
            raise ManifestError(f"resource!: {message}")


def parse_manifest(
    document: Any, callsite_dir: PathLike, yaml_dir: Optional[PathLike]
) -> Manifest:
    """Build a Manifest from an already parsed YAML document."""
    parser = _ManifestParser(Path(callsite_dir), yaml_dir)
    parser.parse_root(document)

    seen: set[str] = set()
    for entry in parser.entries:
        if entry.logical_path in seen:
            raise ManifestError(
                f"resource!: duplicate logical path: {entry.logical_path}"
            )
        seen.add(entry.logical_path)

    return Manifest(
        entries=tuple(parser.entries),
        callsite_dir=Path(callsite_dir),
        used_embeddir=parser.used_embeddir,
    )


def load_manifest(raw: str, callsite_dir: PathLike = ".") -> Manifest:
    """Load a manifest from inline YAML or from a .yaml/.yml file path.

    Emits a UserWarning when embeddir is used, unless silenced through the
    environment.
    """
    source, yaml_dir = read_manifest_source(raw, callsite_dir)
    try:
        document = yaml.safe_load(source)
    except yaml.YAMLError as err:
        raise ManifestError(f"resource!: YAML parse failed: {err}") from err

    manifest = parse_manifest(document, callsite_dir, yaml_dir)
    if manifest.used_embeddir and not env_truthy(SILENCE_ENV_VAR):
        warnings.warn(EMBEDDIR_NOTICE, UserWarning, stacklevel=2)
    return manifest


class ResourceRegistry:
    """Maps logical resource paths to in-memory bytes, files or directories."""

    def __init__(self) -> None:
        self._resources: dict[str, Union[bytes, Path]] = {}
        self._dirs: dict[str, Path] = {}

    def __contains__(self, logical_path: object) -> bool:
        return logical_path in self._resources or logical_path in self._dirs

    def __len__(self) -> int:
        return len(self._resources) + len(self._dirs)

    def _ensure_free(self, logical_path: str) -> None:
        if logical_path in self:
            raise ManifestError(
                f"resource!: logical path already registered: {logical_path}"
            )

    def register(self, logical_path: str, data: Union[bytes, bytearray, PathLike]) -> None:
        """Register bytes held in memory, or a file path read when requested."""
        self._ensure_free(logical_path)
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._resources[logical_path] = bytes(data)
        else:
            self._resources[logical_path] = Path(data)

    def register_dir(self, logical_path: str, directory: PathLike) -> None:
        """Map every file under ``directory`` to paths below ``logical_path``."""
        self._ensure_free(logical_path)
        self._dirs[logical_path] = Path(directory)

    def get(self, logical_path: str) -> Optional[bytes]:
        """Return the bytes of a resource, or None if nothing is registered there."""
        resource = self._resources.get(logical_path)
        if isinstance(resource, bytes):
            return resource
        if isinstance(resource, Path):
            return resource.read_bytes()

        best: Optional[str] = None
        for prefix in self._dirs:
            if logical_path.startswith(prefix + "/") and (
                best is None or len(prefix) > len(best)
            ):
                best = prefix
        if best is None:
            return None

        rest = logical_path[len(best) + 1 :]
        candidate = self._dirs[best].joinpath(*rest.split("/"))
        if not candidate.is_file():
            return None
        return candidate.read_bytes()

    def register_manifest(self, manifest: Manifest) -> None:
        """Register every entry of ``manifest`` in order."""
        for entry in manifest:
            try:
                self._register_entry(entry, manifest.callsite_dir)
            except (OSError, ManifestError) as err:
                detail = entry.source if entry.source is not None else str(entry.kind)
                raise ManifestError(
                    f"resource!: failed to register resource ({entry.logical_path}:{detail}): {err}"
                ) from err

    def _register_entry(self, entry: ResourceEntry, callsite_dir: Path) -> None:
        kind = entry.kind
        if kind is ResourceKind.EMBED:
            assert entry.source is not None
            path = resolve_callsite_path(callsite_dir, entry.source)
            self.register(entry.logical_path, path.read_bytes())
        elif kind is ResourceKind.FS:
            assert entry.source is not None
            self.register(entry.logical_path, Path(entry.source))
        elif kind is ResourceKind.TXT:
            assert entry.text is not None
            self.register(entry.logical_path, entry.text.encode("utf-8"))
        elif kind is ResourceKind.BIN:
            assert entry.data is not None
            self.register(entry.logical_path, entry.data)
        elif kind is ResourceKind.DIR:
            assert entry.source is not None
            self.register_dir(entry.logical_path, Path(entry.source))
        else:
            raise ManifestError(
                f"resource!: {entry.logical_path}: embeddir entries must be expanded first"
            )