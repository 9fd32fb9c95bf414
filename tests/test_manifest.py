import warnings

import pytest

from jungle.entries import ManifestError, ResourceEntry, ResourceKind
from jungle.manifest import (
    SILENCE_ENV_VAR,
    Manifest,
    ResourceRegistry,
    env_truthy,
    load_manifest,
    looks_like_yaml_path,
    parse_manifest,
    read_manifest_source,
)


@pytest.mark.parametrize("value", ["1", "true", " TRUE ", "yes", "on"])
def test_env_truthy_accepts_truthy_values(monkeypatch, value):
    monkeypatch.setenv("JUNGLE_TEST_FLAG", value)
    assert env_truthy("JUNGLE_TEST_FLAG") is True


@pytest.mark.parametrize("value", ["0", "no", "", "off", "maybe"])
def test_env_truthy_rejects_other_values(monkeypatch, value):
    monkeypatch.setenv("JUNGLE_TEST_FLAG", value)
    assert env_truthy("JUNGLE_TEST_FLAG") is False


def test_env_truthy_unset(monkeypatch):
    monkeypatch.delenv("JUNGLE_TEST_FLAG", raising=False)
    assert env_truthy("JUNGLE_TEST_FLAG") is False


@pytest.mark.parametrize(
    "text,expected",
    [
        ("assets/resources.yaml", True),
        (" res.yml ", True),
        ("- a.txt: txt", False),
        ("resources.json", False),
    ],
)
def test_looks_like_yaml_path(text, expected):
    assert looks_like_yaml_path(text) is expected


def test_read_manifest_source_inline(tmp_path):
    text = "- a: txt\n  txt: hi\n"
    assert read_manifest_source(text, tmp_path) == (text, None)


def test_read_manifest_source_file(tmp_path):
    (tmp_path / "cfg").mkdir()
    (tmp_path / "cfg" / "res.yaml").write_text("- a: txt\n  txt: hi\n")
    source, yaml_dir = read_manifest_source("cfg/res.yaml", tmp_path)
    assert source == "- a: txt\n  txt: hi\n"
    assert str(yaml_dir) == "cfg"


def test_read_manifest_source_missing_file(tmp_path):
    with pytest.raises(ManifestError):
        read_manifest_source("missing.yaml", tmp_path)


def test_inline_txt_and_bin(tmp_path):
    manifest = load_manifest(
        "- hello.txt: txt\n  txt: hello\n- blob.bin: bin\n  bin: '00 ff 7a'\n",
        tmp_path,
    )
    assert manifest.logical_paths == ["hello.txt", "blob.bin"]
    assert manifest.entries[0].text == "hello"
    assert manifest.entries[1].data == bytes([0x00, 0xFF, 0x7A])
    assert manifest.entries[1].kind is ResourceKind.BIN
    assert manifest.used_embeddir is False


def test_nested_directories_build_logical_paths(tmp_path):
    manifest = load_manifest(
        "- textures:\n"
        "  - ui:\n"
        "    - icon.png: fs\n"
        "      from: art/icon.png\n"
        "  - bamboo.png: fs\n"
        "    from: art/bamboo.png\n",
        tmp_path,
    )
    assert manifest.logical_paths == ["textures/ui/icon.png", "textures/bamboo.png"]
    assert manifest.entries[0].source == "art/icon.png"


def test_embed_from_yaml_file_is_relative_to_yaml_dir(tmp_path):
    (tmp_path / "cfg").mkdir()
    (tmp_path / "cfg" / "res.yaml").write_text(
        "- img.png: embed\n  from: img.png\n- disk.png: fs\n  from: img.png\n"
    )
    manifest = load_manifest("cfg/res.yaml", tmp_path)
    embed, fs = manifest.entries
    assert embed.source.replace("\\", "/") == "cfg/img.png"
    assert fs.source == "img.png"


@pytest.mark.parametrize(
    "text",
    [
        "a: txt",
        "- just a string",
        "- a.txt: nonsense\n",
        "- a.png: embed\n",
        "- a.txt: txt\n  txt: hi\n  from: x\n",
        "- a.bin: bin\n  bin: '00'\n  txt: hi\n",
        "- a.txt: txt\n  b.txt: txt\n  txt: hi\n",
        "- a.txt: 5\n  txt: hi\n",
        "- a.txt: txt\n  txt: 12\n",
        "- a.txt: txt\n  txt: ''\n",
        "- d: dir\n",
        "- from: x\n  txt: y\n",
        "- a.bin: bin\n  bin: '0x00'\n",
        "- a.txt: txt\n  txt: hi\n- a.txt: txt\n  txt: again\n",
        "- a: [unclosed\n",
    ],
)
def test_invalid_manifests_raise(tmp_path, text):
    with pytest.raises(ManifestError):
        load_manifest(text, tmp_path)


def test_parse_manifest_rejects_slash_in_directory_name(tmp_path):
    document = [{"a/b": [{"x.txt": "txt", "txt": "hi"}]}]
    with pytest.raises(ManifestError):
        parse_manifest(document, tmp_path, None)


def test_parse_manifest_from_document(tmp_path):
    document = [{"shaders": [{"bg.fs": "fs", "from": "shaders/bg.fs"}]}]
    manifest = parse_manifest(document, tmp_path, None)
    assert list(manifest) == [
        ResourceEntry("shaders/bg.fs", ResourceKind.FS, source="shaders/bg.fs")
    ]
    assert len(manifest) == 1


def _make_embeddir(tmp_path):
    root = tmp_path / "assets"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"A")
    (root / "sub" / "b.txt").write_bytes(b"B")
    return "- pack: embeddir\n  from: assets\n"


def test_embeddir_warns_and_expands(tmp_path, monkeypatch):
    monkeypatch.delenv(SILENCE_ENV_VAR, raising=False)
    text = _make_embeddir(tmp_path)
    with pytest.warns(UserWarning):
        manifest = load_manifest(text, tmp_path)
    assert manifest.used_embeddir is True
    assert manifest.logical_paths == ["pack/a.txt", "pack/sub/b.txt"]
    assert all(entry.kind is ResourceKind.EMBED for entry in manifest)


def test_embeddir_warning_can_be_silenced(tmp_path, monkeypatch):
    monkeypatch.setenv(SILENCE_ENV_VAR, "1")
    text = _make_embeddir(tmp_path)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        manifest = load_manifest(text, tmp_path)
    assert len(manifest) == 2


def test_registry_registers_manifest(tmp_path, monkeypatch):
    monkeypatch.setenv(SILENCE_ENV_VAR, "1")
    monkeypatch.chdir(tmp_path)
    (tmp_path / "img.bin").write_bytes(b"\x01\x02")
    (tmp_path / "disk.bin").write_bytes(b"disk")
    (tmp_path / "static" / "sub").mkdir(parents=True)
    (tmp_path / "static" / "sub" / "f.txt").write_bytes(b"file")
    _make_embeddir(tmp_path)

    manifest = load_manifest(
        "- hello.txt: txt\n  txt: hello\n"
        "- blob.bin: bin\n  bin: '00 ff'\n"
        "- img.bin: embed\n  from: img.bin\n"
        "- disk.bin: fs\n  from: disk.bin\n"
        "- web: dir\n  from: static\n"
        "- pack: embeddir\n  from: assets\n",
        tmp_path,
    )
    registry = ResourceRegistry()
    registry.register_manifest(manifest)

    assert registry.get("hello.txt") == b"hello"
    assert registry.get("blob.bin") == b"\x00\xff"
    assert registry.get("img.bin") == b"\x01\x02"
    assert registry.get("disk.bin") == b"disk"
    assert registry.get("web/sub/f.txt") == b"file"
    assert registry.get("pack/sub/b.txt") == b"B"
    assert registry.get("web/missing.txt") is None
    assert registry.get("nothing") is None


def test_registry_fs_is_read_lazily(tmp_path):
    target = tmp_path / "late.txt"
    registry = ResourceRegistry()
    registry.register("late", target)
    target.write_bytes(b"later")
    assert registry.get("late") == b"later"


def test_registry_rejects_duplicate_paths(tmp_path):
    registry = ResourceRegistry()
    registry.register("a", b"x")
    with pytest.raises(ManifestError):
        registry.register("a", b"y")
    with pytest.raises(ManifestError):
        registry.register_dir("a", tmp_path)
    assert registry.get("a") == b"x"


def test_registry_missing_embed_file_fails(tmp_path):
    manifest = Manifest(
        entries=(ResourceEntry("x", ResourceKind.EMBED, source="absent.bin"),),
        callsite_dir=tmp_path,
    )
    registry = ResourceRegistry()
    with pytest.raises(ManifestError):
        registry.register_manifest(manifest)
    assert "x" not in registry