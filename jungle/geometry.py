"""Demo scene geometry: triangle meshes and texture coordinates.

Points are ``(x, y, z)`` tuples, texture coordinates are ``(u, v)`` tuples
and a triangle is a tuple of three points.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Triangle = tuple[Vec3, Vec3, Vec3]
UvPatch = tuple[Vec2, Vec2, Vec2]

_CUBE_HALF = 0.5
_FACE_EPS = 1.0e-4

# Cube texture atlas: an unfolded-cube layout of 20x20 cells in an 80x60
# image, each cell holding a 16x16 picture framed by a 2px transparent border.
_ATLAS_WIDTH = 80.0
_ATLAS_HEIGHT = 60.0
_ATLAS_CELL = 20.0
_ATLAS_INNER = 16.0
_ATLAS_INSET = 2.0


class CubeFace(Enum):
    """A face of an axis-aligned cube."""

    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


def ground_triangles() -> list[Triangle]:
    """A unit square on the y = 0 plane, spanning -1..1 in x and z."""
    return [
        ((-1.0, 0.0, -1.0), (-1.0, 0.0, 1.0), (1.0, 0.0, -1.0)),
        ((1.0, 0.0, -1.0), (-1.0, 0.0, 1.0), (1.0, 0.0, 1.0)),
    ]


def triangle_triangles() -> list[Triangle]:
    """A single upright triangle on the z = 0 plane."""
    return [((0.0, 0.6, 0.0), (-0.5, -0.4, 0.0), (0.5, -0.4, 0.0))]


def cube_triangles() -> list[Triangle]:
    """Twelve triangles forming a unit cube centred on the origin."""
    h = _CUBE_HALF
    return [
        # front (z+)
        ((-h, -h, h), (h, -h, h), (h, h, h)),
        ((-h, -h, h), (h, h, h), (-h, h, h)),
        # back (z-)
        ((-h, -h, -h), (h, h, -h), (h, -h, -h)),
        ((-h, -h, -h), (-h, h, -h), (h, h, -h)),
        # left (x-)
        ((-h, -h, -h), (-h, -h, h), (-h, h, h)),
        ((-h, -h, -h), (-h, h, h), (-h, h, -h)),
        # right (x+)
        ((h, -h, -h), (h, h, h), (h, -h, h)),
        ((h, -h, -h), (h, h, -h), (h, h, h)),
        # top (y+)
        ((-h, h, -h), (-h, h, h), (h, h, h)),
        ((-h, h, -h), (h, h, h), (h, h, -h)),
        # bottom (y-)
        ((-h, -h, -h), (h, -h, h), (-h, -h, h)),
        ((-h, -h, -h), (h, -h, -h), (h, -h, h)),
    ]


def quad_triangles(width: float, height: float, z: float) -> list[Triangle]:
    """Two triangles covering a ``width`` x ``height`` rectangle.

    The origin is the top-left corner and the rectangle extends towards +x
    and -y (world y points up).
    """
    p0 = (0.0, 0.0, z)
    p1 = (width, 0.0, z)
    p2 = (0.0, -height, z)
    p3 = (width, -height, z)
    return [(p0, p1, p2), (p1, p3, p2)]


def quad_uv_patches() -> list[UvPatch]:
    """Texture coordinates mapping a whole texture onto :func:`quad_triangles`."""
    return [
        ((0.0, 0.0), (1.0, 0.0), (0.0, 1.0)),
        ((1.0, 0.0), (1.0, 1.0), (0.0, 1.0)),
    ]


def identify_face(triangle: Sequence[Sequence[float]], half: float) -> CubeFace:
    """Return the cube face that all three vertices of ``triangle`` lie on.

    Faces are tried in the order front, back, right, left, top, bottom.
    Raises ValueError if the triangle is not on the surface of the cube.
    """

    def on_plane(axis: int, value: float) -> bool:
        return all(abs(vertex[axis] - value) <= _FACE_EPS for vertex in triangle)

    checks = (
        (2, half, CubeFace.FRONT),
        (2, -half, CubeFace.BACK),
        (0, half, CubeFace.RIGHT),
        (0, -half, CubeFace.LEFT),
        (1, half, CubeFace.TOP),
        (1, -half, CubeFace.BOTTOM),
    )
    for axis, value, face in checks:
        if on_plane(axis, value):
            return face
    raise ValueError(
        "cannot identify face: triangle does not lie on an axis-aligned cube surface"
    )


def _cell_origin(column: float, row: float) -> Vec2:
    return (
        _ATLAS_CELL * column / _ATLAS_WIDTH,
        _ATLAS_CELL * row / _ATLAS_HEIGHT,
    )


_FACE_ORIGINS: dict[CubeFace, Vec2] = {
    CubeFace.TOP: _cell_origin(1, 0),
    CubeFace.BOTTOM: _cell_origin(1, 2),
    CubeFace.FRONT: _cell_origin(1, 1),
    CubeFace.BACK: _cell_origin(3, 1),
    CubeFace.LEFT: _cell_origin(0, 1),
    CubeFace.RIGHT: _cell_origin(2, 1),
}


def _face_offsets(face: CubeFace, vertex: Sequence[float], half: float) -> Vec2:
    x, y, z = vertex[0], vertex[1], vertex[2]
    if face is CubeFace.FRONT:
        return x + half, half - y
    if face is CubeFace.BACK:
        return half - x, half - y
    if face is CubeFace.LEFT:
        return z + half, half - y
    if face is CubeFace.RIGHT:
        return half - z, half - y
    if face is CubeFace.TOP:
        return x + half, z + half
    return x + half, half - z


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def compute_cube_uv_patches(
    triangles: Sequence[Sequence[Sequence[float]]],
) -> list[UvPatch]:
    """Map each cube triangle into its face's cell of the cube texture atlas.

    Coordinates land in the 16x16 interior of each 20x20 cell, skipping the
    transparent border. Raises ValueError for a triangle off the cube surface.
    """
    inner_u = _ATLAS_INNER / _ATLAS_WIDTH
    inner_v = _ATLAS_INNER / _ATLAS_HEIGHT
    inset_u = _ATLAS_INSET / _ATLAS_WIDTH
    inset_v = _ATLAS_INSET / _ATLAS_HEIGHT

    patches: list[UvPatch] = []
    for triangle in triangles:
        face = identify_face(triangle, _CUBE_HALF)
        origin_u, origin_v = _FACE_ORIGINS[face]
        uvs = []
        for vertex in triangle:
            u_offset, v_offset = _face_offsets(face, vertex, _CUBE_HALF)
            uvs.append(
                (
                    origin_u + inset_u + _clamp01(u_offset) * inner_u,
                    origin_v + inset_v + _clamp01(v_offset) * inner_v,
                )
            )
        patches.append((uvs[0], uvs[1], uvs[2]))
    return patches