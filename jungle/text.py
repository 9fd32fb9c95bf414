"""Rendering text into RGBA textures.

Text is rasterised with a TrueType/OpenType font and returned as PNG bytes
together with the texture size. Fonts are looked up by system family name
or taken from raw font file bytes (ttf/otf/ttc). An optional shadow is drawn
underneath the text.
"""

from __future__ import annotations

import io
import math
import os
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

from PIL import Image, ImageDraw, ImageFont

Color = tuple[int, int, int, int]

_FONT_SUFFIXES = frozenset({".ttf", ".otf", ".ttc", ".otc"})
_SFNT_VERSIONS = frozenset({b"\x00\x01\x00\x00", b"OTTO", b"true", b"typ1"})
_MAX_NAME_SAMPLE = 64
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


class FontError(ValueError):
    """Raised when a font cannot be found, parsed or loaded."""


@dataclass(frozen=True)
class Font:
    """Where a font comes from.

    With ``data`` unset, ``name`` is a system font family name. With ``data``
    set, it holds the bytes of a font file and ``name`` selects the face
    inside it.
    """

    name: str
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def system(cls, name: str) -> "Font":
        """A font found among the installed system fonts by family name."""
        return cls(name=name)

    @classmethod
    def resource(cls, data: bytes, face_name: str) -> "Font":
        """A font read from file bytes, choosing the face named ``face_name``."""
        return cls(name=face_name, data=bytes(data))

    @property
    def is_system(self) -> bool:
        return self.data is None

    def load(self, size_px: float) -> ImageFont.FreeTypeFont:
        """Load the font at the given pixel size."""
        if self.data is None:
            data, index = _load_system_font_bytes(self.name)
        else:
            data = self.data
            index = find_face_index(data, self.name)
        try:
            return ImageFont.truetype(
                io.BytesIO(data), size=_pillow_size(size_px), index=index
            )
        except (OSError, ValueError) as err:
            raise FontError(f"failed to parse font bytes: {err}") from err


@dataclass(frozen=True)
class TextShadow:
    """A shadow drawn as a copy of the glyphs, offset in texture pixels.

    x grows to the right and y grows downwards.
    """

    offset_px: tuple[int, int]
    color: Color


@dataclass(frozen=True)
class TextRenderOptions:
    """How text is rendered."""

    font_size_px: float = 32.0
    color: Color = (255, 255, 255, 255)
    padding_px: int = 2
    shadow: Optional[TextShadow] = None


@dataclass(frozen=True)
class TextTexture:
    """A rendered text texture: PNG bytes and its size in pixels."""

    resource: bytes
    width: int
    height: int


def _pillow_size(size_px: float) -> Union[int, float]:
    value = float(size_px)
    return int(value) if value.is_integer() else value


# ---------------------------------------------------------------------------
# Font file inspection


def _fonts_in_collection(data: bytes) -> Optional[int]:
    if data[:4] != b"ttcf" or len(data) < 12:
        return None
    (count,) = struct.unpack_from(">I", data, 8)
    return count


def _face_offset(data: bytes, index: int) -> int:
    if data[:4] != b"ttcf":
        if index != 0:
            raise FontError(f"failed to parse font face at index {index}")
        return 0
    position = 12 + 4 * index
    if position + 4 > len(data):
        raise FontError(f"failed to parse font face at index {index}")
    (offset,) = struct.unpack_from(">I", data, position)
    return offset


def _find_table(data: bytes, face_offset: int, tag: bytes, index: int) -> Optional[bytes]:
    if face_offset + 12 > len(data) or data[face_offset : face_offset + 4] not in _SFNT_VERSIONS:
        raise FontError(f"failed to parse font face at index {index}")
    (num_tables,) = struct.unpack_from(">H", data, face_offset + 4)
    records_end = face_offset + 12 + 16 * num_tables
    if records_end > len(data):
        raise FontError(f"failed to parse font face at index {index}")
    for record in range(face_offset + 12, records_end, 16):
        table_tag = data[record : record + 4]
        offset, length = struct.unpack_from(">II", data, record + 8)
        if table_tag == tag:
            if offset + length > len(data):
                raise FontError(f"failed to parse font face at index {index}")
            return data[offset : offset + length]
    return None


def _decode_name(platform_id: int, encoding_id: int, raw: bytes) -> Optional[str]:
    if platform_id == 0 or (platform_id == 3 and encoding_id in (0, 1, 10)):
        codec = "utf-16-be"
    elif platform_id == 1 and encoding_id == 0:
        codec = "mac_roman"
    else:
        return None
    try:
        return raw.decode(codec)
    except UnicodeDecodeError:
        return None


def _face_names(data: bytes, index: int) -> Iterator[str]:
    table = _find_table(data, _face_offset(data, index), b"name", index)
    if table is None or len(table) < 6:
        return
    _format, count, string_offset = struct.unpack_from(">HHH", table, 0)
    for record in range(6, min(6 + 12 * count, len(table) - 11), 12):
        platform_id, encoding_id, _lang, _name_id, length, offset = struct.unpack_from(
            ">HHHHHH", table, record
        )
        start = string_offset + offset
        if start + length > len(table):
            continue
        name = _decode_name(platform_id, encoding_id, table[start : start + length])
        if name is not None:
            yield name


def find_face_index(data: bytes, face_name: str) -> int:
    """Return the index of the face in ``data`` that carries ``face_name``.

    Names are compared ignoring ASCII case. Works for single fonts and for
    font collections.
    """
    face_count = _fonts_in_collection(data) or 1
    wanted = face_name.translate(_ASCII_LOWER)
    available: list[str] = []

    for index in range(face_count):
        for name in _face_names(data, index):
            if not name:
                continue
            if len(available) < _MAX_NAME_SAMPLE:
                available.append(name)
            if name.translate(_ASCII_LOWER) == wanted:
                return index

    raise FontError(
        f"font face not found in font bytes: {face_name} "
        f"(available names sample: {available!r})"
    )


def _system_font_dirs() -> list[Path]:
    home = Path.home()
    if sys.platform.startswith("win"):
        windir = os.environ.get("WINDIR", r"C:\Windows")
        dirs = [Path(windir) / "Fonts"]
        local = os.environ.get("LOCALAPPDATA")
        if local:
            dirs.append(Path(local) / "Microsoft" / "Windows" / "Fonts")
        return dirs
    if sys.platform == "darwin":
        return [
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
            home / "Library" / "Fonts",
        ]
    data_home = os.environ.get("XDG_DATA_HOME")
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".fonts",
        Path(data_home) / "fonts" if data_home else home / ".local" / "share" / "fonts",
    ]


def _system_font_files() -> Iterator[Path]:
    for directory in _system_font_dirs():
        if not directory.is_dir():
            continue
        for root, dirnames, filenames in os.walk(directory):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(root) / filename
                if path.suffix.lower() in _FONT_SUFFIXES:
                    yield path


def _load_system_font_bytes(name: str) -> tuple[bytes, int]:
    for path in _system_font_files():
        try:
            data = path.read_bytes()
            return data, find_face_index(data, name)
        except (OSError, FontError, struct.error):
            continue
    raise FontError(f"system font not found: {name}")


# ---------------------------------------------------------------------------
# Rasterisation


def blend_coverage(
    rgba: Union[bytes, bytearray],
    width: int,
    height: int,
    coverage: Sequence[Sequence[int]],
    origin_x: int,
    origin_y: int,
    color: Sequence[int],
) -> bytearray:
    """Blend a coverage mask of ``color`` over an RGBA buffer.

    ``coverage`` is a sequence of rows of 0..255 alpha values placed with its
    top-left corner at (``origin_x``, ``origin_y``); parts outside the buffer
    are clipped. Returns the blended buffer; the input is left untouched.
    """
    if len(rgba) != width * height * 4:
        raise ValueError("rgba buffer size does not match width and height")
    red, green, blue, alpha = (int(c) for c in color)
    out = bytearray(rgba)

    for dy, row in enumerate(coverage):
        dst_y = origin_y + dy
        if not 0 <= dst_y < height:
            continue
        for dx, glyph_alpha in enumerate(row):
            dst_x = origin_x + dx
            if not 0 <= dst_x < width or glyph_alpha == 0:
                continue
            src_a = glyph_alpha * alpha // 255
            if src_a == 0:
                continue
            idx = (dst_y * width + dst_x) * 4
            inv = max(255 - src_a, 0)
            out[idx] = (red * src_a + out[idx] * inv) // 255
            out[idx + 1] = (green * src_a + out[idx + 1] * inv) // 255
            out[idx + 2] = (blue * src_a + out[idx + 2] * inv) // 255
            out[idx + 3] = src_a + out[idx + 3] * inv // 255
    return out


def _text_coverage(
    text: str, font: ImageFont.ImageFont
) -> tuple[int, int, list[bytes]]:
    left, top, right, bottom = ImageDraw.Draw(Image.new("L", (1, 1))).multiline_textbbox(
        (0, 0), text, font=font
    )
    x0, y0 = math.floor(left), math.floor(top)
    x1, y1 = math.ceil(right), math.ceil(bottom)
    glyph_width, glyph_height = x1 - x0, y1 - y0
    if glyph_width <= 0 or glyph_height <= 0:
        return x0, y0, []

    mask = Image.new("L", (glyph_width, glyph_height), 0)
    ImageDraw.Draw(mask).multiline_text((-x0, -y0), text, fill=255, font=font)
    data = mask.tobytes()
    rows = [data[start : start + glyph_width] for start in range(0, len(data), glyph_width)]
    return x0, y0, rows


def rasterize_text_rgba(
    text: str, font: ImageFont.ImageFont, options: TextRenderOptions
) -> tuple[int, int, bytes]:
    """Rasterise ``text`` with a loaded font into (width, height, RGBA bytes).

    Empty text yields a single transparent pixel.
    """
    if not text:
        return 1, 1, bytes(4)

    x0, y0, rows = _text_coverage(text, font)
    x1 = x0 + (len(rows[0]) if rows else 0)
    y1 = y0 + len(rows)
    padding = int(options.padding_px)
    shadow = options.shadow

    min_x, min_y = min(0.0, x0), min(0.0, y0)
    max_x, max_y = max(0.0, x1), max(0.0, y1)
    if shadow is not None and rows:
        sdx, sdy = shadow.offset_px
        min_x, min_y = min(min_x, x0 + sdx), min(min_y, y0 + sdy)
        max_x, max_y = max(max_x, x1 + sdx), max(max_y, y1 + sdy)

    content_width = int(max(math.ceil(max_x - min_x), 1))
    content_height = int(max(math.ceil(max_y - min_y), 1))
    width = max(content_width + padding * 2, 1)
    height = max(content_height + padding * 2, 1)

    origin_x = round(-min_x) + padding + x0
    origin_y = round(-min_y) + padding + y0

    rgba = bytearray(width * height * 4)
    if shadow is not None:
        sdx, sdy = shadow.offset_px
        rgba = blend_coverage(
            rgba, width, height, rows, origin_x + sdx, origin_y + sdy, shadow.color
        )
    rgba = blend_coverage(rgba, width, height, rows, origin_x, origin_y, options.color)
    return width, height, bytes(rgba)


def _loaded(font: Union[Font, ImageFont.ImageFont], size_px: float) -> ImageFont.ImageFont:
    if isinstance(font, Font):
        return font.load(size_px)
    return font


def render_text_to_texture(
    text: str,
    font: Union[Font, ImageFont.ImageFont],
    options: Optional[TextRenderOptions] = None,
) -> TextTexture:
    """Render ``text`` into a PNG texture and report its size.

    ``font`` is a :class:`Font` or an already loaded Pillow font.
    """
    options = options or TextRenderOptions()
    loaded = _loaded(font, options.font_size_px)
    width, height, rgba = rasterize_text_rgba(text, loaded, options)

    buffer = io.BytesIO()
    try:
        Image.frombytes("RGBA", (width, height), rgba).save(buffer, format="PNG")
    except (OSError, ValueError) as err:
        raise FontError(f"failed to encode text texture as png: {err}") from err
    return TextTexture(resource=buffer.getvalue(), width=width, height=height)


def render_text_to_png(
    text: str,
    font: Union[Font, ImageFont.ImageFont],
    options: Optional[TextRenderOptions] = None,
) -> bytes:
    """Render ``text`` and return only the PNG bytes."""
    return render_text_to_texture(text, font, options).resource