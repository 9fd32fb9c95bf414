# jungle

Building blocks for a small game engine, usable on their own:

- **Resource manifests** (`jungle.manifest`, `jungle.entries`): describe game
  resources in YAML and register them under logical paths such as
  `textures/bamboo.png`.
- **Text textures** (`jungle.text`): rasterize text with a TrueType/OpenType
  font into RGBA pixels or a PNG, with an optional drop shadow.
- **Geometry** (`jungle.geometry`): ground, triangle, cube and quad meshes, and
  UV patches that map a cube onto a texture atlas.
- **Camera controls** (`jungle.controls`): map keys, mouse motion and wheel
  input to a first-person camera controller.

## Installation

```
pip install .
```

Development and tests:

```
pip install ".[test]"
pytest
```

## Resource manifests

A manifest is a YAML list. A node with a single key whose value is a list is a
directory; any other node is a resource with a name, a kind and its data:

```yaml
- textures:
    - bamboo.png: embed
      from: assets/bamboo.png
- shaders: dir
  from: shaders
- greeting.txt: txt
  txt: |
    hello
- blob: bin
  bin: |
    00 ff 7a
- icons: embeddir
  from: assets/icons
```

Kinds (`ResourceKind`):

- `embed`: the file's bytes are read when the manifest is registered. When the
  manifest was loaded from a file, a relative `from` is taken relative to that
  file's directory.
- `embeddir`: expanded into one `embed` entry per regular file below the
  directory (symbolic links are skipped), named `<name>/<relative path>`.
- `fs`: the file is read each time the resource is requested.
- `txt`: inline text, stored as UTF-8.
- `bin`: whitespace-separated two-digit hex bytes without a `0x` prefix
  (see `parse_hex_byte_blob`).
- `dir`: a directory mapping; `registry.get("<name>/a/b.png")` reads
  `<from>/a/b.png`.

```python
from pathlib import Path
from jungle.manifest import ResourceRegistry, load_manifest

manifest = load_manifest("resources.yaml", Path("."))
registry = ResourceRegistry()
registry.register_manifest(manifest)
data = registry.get("textures/bamboo.png")  # bytes, or None if not registered
```

`load_manifest` accepts either inline YAML text or a path ending in `.yaml` or
`.yml`, resolved against the given directory. When a manifest uses `embeddir`,
a `UserWarning` reminds that the file list is taken at load time; set
`JUNGLE_RESOURCE_EMBEDDIR_SILENCE=1` to silence it.

Errors in a manifest (unknown kinds, missing or disallowed fields, empty path
segments or segments with `/`, duplicate logical paths, bad hex bytes) and
registering the same logical path twice raise `jungle.entries.ManifestError`.

## Text textures

```python
from pathlib import Path
from jungle.text import Font, TextRenderOptions, TextShadow, render_text_to_png

font = Font.resource(Path("DejaVuSans.ttf").read_bytes(), "DejaVu Sans")
options = TextRenderOptions(
    font_size_px=42.0,
    shadow=TextShadow(offset_px=(2, 2), color=(0, 0, 0, 220)),
)
png_bytes = render_text_to_png("Hello Jungle Engine", font, options)
```

- `Font.resource(data, face_name)` picks the face by name (ASCII case
  ignored) inside a font file or a font collection; `find_face_index` does the
  lookup on its own.
- `Font.system(name)` searches the usual system font directories for a face
  with that name.
- `render_text_to_texture` returns a `TextTexture` with the PNG bytes and the
  texture width and height; `rasterize_text_rgba` returns the raw RGBA pixels.
- Defaults: 32 px, white, 2 px padding, no shadow. Empty text gives a single
  transparent pixel.

A font that cannot be found or parsed raises `jungle.text.FontError`.

## Geometry and camera

```python
from jungle.geometry import cube_triangles, compute_cube_uv_patches
from jungle.controls import ActionInput, CameraAction, CameraController

patches = compute_cube_uv_patches(cube_triangles())

controller = CameraController()
controller.handle_event(ActionInput(CameraAction.MOVE_FORWARD, True))
step = controller.move_step(forward=(0.0, 0.0, -1.0), right=(1.0, 0.0, 0.0), dt=0.016)
```

`map_key_to_camera_action` maps W/A/S/D, Space and the left Alt key to
`CameraAction` values; `wheel_steps_from_delta` turns wheel deltas into line
steps. `CameraController.apply_rotation` consumes pending mouse motion into a
(pitch, yaw, roll) rotation with pitch clamped to ±1.55 rad, and `zoomed_fov`
consumes pending wheel steps into a new half field of view.

## What this package does not do

There is no window, renderer, game loop or scene graph here: the text module
produces images and the geometry and controls modules produce numbers, but
nothing draws them on screen or reads input devices. `ResourceRegistry` keeps
resources in memory only and has no persistent storage.