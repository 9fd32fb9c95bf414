"""First-person camera controls: key mapping, input events and movement."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

# Smallest single-precision step; wheel deltas at or below it are ignored.
FLOAT_EPSILON = 1.1920929e-07
PIXELS_PER_WHEEL_LINE = 120.0
PITCH_LIMIT = 1.55
_MIN_NORM_SQUARED = 1e-6
_UP: Vec3 = (0.0, 1.0, 0.0)


class CameraAction(Enum):
    """A camera movement bound to a key."""

    MOVE_FORWARD = "move_forward"
    MOVE_BACKWARD = "move_backward"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"


@dataclass(frozen=True)
class ActionInput:
    """A movement key was pressed or released."""

    action: CameraAction
    pressed: bool


@dataclass(frozen=True)
class MouseDelta:
    """Relative mouse motion in pixels (y grows downwards)."""

    dx: float
    dy: float


@dataclass(frozen=True)
class MouseWheel:
    """Mouse wheel motion in lines; positive means scrolled up."""

    steps: float


@dataclass(frozen=True)
class ClearInput:
    """Forget all held keys and pending motion (e.g. on focus loss)."""


InputEvent = Union[ActionInput, MouseDelta, MouseWheel, ClearInput]

_CHARACTER_ACTIONS = {
    "w": CameraAction.MOVE_FORWARD,
    "s": CameraAction.MOVE_BACKWARD,
    "a": CameraAction.MOVE_LEFT,
    "d": CameraAction.MOVE_RIGHT,
}


def map_key_to_camera_action(
    character: Optional[str] = None,
    named: Optional[str] = None,
    physical: Optional[str] = None,
) -> Optional[CameraAction]:
    """Map a key to a camera action.

    ``character`` is the logical character of the key, ``named`` the name of
    a named logical key (such as ``"Space"``) and ``physical`` the physical
    key code (such as ``"AltLeft"``). A character key is decided by the
    character alone; otherwise Space moves up and the left Alt key moves down.
    """
    if character is not None:
        if character in ("w", "W", "s", "S", "a", "A", "d", "D"):
            return _CHARACTER_ACTIONS[character.lower()]
        return None
    if named == "Space":
        return CameraAction.MOVE_UP
    if physical == "AltLeft":
        return CameraAction.MOVE_DOWN
    return None


def wheel_steps_from_delta(
    line_y: Optional[float] = None, pixel_y: Optional[float] = None
) -> Optional[float]:
    """Convert a wheel delta into line steps, or None for a negligible delta.

    Exactly one of ``line_y`` (lines) and ``pixel_y`` (pixels, 120 per line)
    must be given.
    """
    if (line_y is None) == (pixel_y is None):
        raise ValueError("exactly one of line_y and pixel_y must be given")
    steps = float(line_y) if line_y is not None else float(pixel_y) / PIXELS_PER_WHEEL_LINE
    if abs(steps) <= FLOAT_EPSILON:
        return None
    return steps


def _flatten(vector: Sequence[float]) -> Vec3:
    x, _, z = (float(c) for c in vector)
    squared = x * x + z * z
    if squared > _MIN_NORM_SQUARED:
        length = math.sqrt(squared)
        return (x / length, 0.0, z / length)
    return (x, 0.0, z)


def _add(a: Vec3, b: Vec3, sign: float = 1.0) -> Vec3:
    return (a[0] + sign * b[0], a[1] + sign * b[1], a[2] + sign * b[2])


@dataclass
class CameraController:
    """Accumulates input and turns it into camera movement, rotation and zoom."""

    move_speed: float = 6.0
    mouse_sensitivity: float = 0.003
    zoom_sensitivity_degrees: float = 2.0
    pressed: set[CameraAction] = field(default_factory=set)
    mouse_delta: Vec2 = (0.0, 0.0)
    wheel_steps: float = 0.0

    def handle_event(self, event: object) -> bool:
        """Record an input event; returns False for events that are not input."""
        if isinstance(event, ClearInput):
            self.pressed.clear()
            self.mouse_delta = (0.0, 0.0)
            self.wheel_steps = 0.0
        elif isinstance(event, ActionInput):
            if event.pressed:
                self.pressed.add(event.action)
            else:
                self.pressed.discard(event.action)
        elif isinstance(event, MouseDelta):
            dx, dy = self.mouse_delta
            self.mouse_delta = (dx + event.dx, dy + event.dy)
        elif isinstance(event, MouseWheel):
            self.wheel_steps += event.steps
        else:
            return False
        return True

    def is_pressed(self, action: CameraAction) -> bool:
        return action in self.pressed

    def move_step(
        self, forward: Sequence[float], right: Sequence[float], dt: float
    ) -> Vec3:
        """Translation for this frame from the held keys.

        ``forward`` and ``right`` are the camera's basis vectors; movement
        uses their horizontal parts, with +Y as the global up.
        """
        if dt <= 0.0:
            return (0.0, 0.0, 0.0)
        flat_forward = _flatten(forward)
        flat_right = _flatten(right)

        direction: Vec3 = (0.0, 0.0, 0.0)
        for action, vector, sign in (
            (CameraAction.MOVE_FORWARD, flat_forward, 1.0),
            (CameraAction.MOVE_BACKWARD, flat_forward, -1.0),
            (CameraAction.MOVE_RIGHT, flat_right, 1.0),
            (CameraAction.MOVE_LEFT, flat_right, -1.0),
            (CameraAction.MOVE_UP, _UP, 1.0),
            (CameraAction.MOVE_DOWN, _UP, -1.0),
        ):
            if self.is_pressed(action):
                direction = _add(direction, vector, sign)

        squared = sum(c * c for c in direction)
        if squared <= _MIN_NORM_SQUARED:
            return (0.0, 0.0, 0.0)
        scale = self.move_speed * dt / math.sqrt(squared)
        return (direction[0] * scale, direction[1] * scale, direction[2] * scale)

    def apply_rotation(self, rotation: Sequence[float]) -> Vec3:
        """Apply and consume the pending mouse motion to a (pitch, yaw, roll) rotation.

        Moving right turns right (yaw decreases); moving up looks up. Pitch is
        clamped to +/-1.55 radians.
        """
        pitch, yaw, roll = (float(c) for c in rotation)
        dx, dy = self.mouse_delta
        self.mouse_delta = (0.0, 0.0)
        if abs(dx) > 0.0:
            yaw -= dx * self.mouse_sensitivity
        if abs(dy) > 0.0:
            pitch = min(max(pitch - dy * self.mouse_sensitivity, -PITCH_LIMIT), PITCH_LIMIT)
        return (pitch, yaw, roll)

    def zoomed_fov(self, current_degrees: float) -> Optional[float]:
        """Consume the pending wheel steps and return the new half field of view.

        Scrolling up narrows the view. Returns None when there is nothing to apply.
        """
        steps = self.wheel_steps
        self.wheel_steps = 0.0
        if abs(steps) <= FLOAT_EPSILON:
            return None
        return current_degrees - steps * self.zoom_sensitivity_degrees