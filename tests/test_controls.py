import math

import pytest

from jungle.controls import (
    ActionInput,
    CameraAction,
    CameraController,
    ClearInput,
    MouseDelta,
    MouseWheel,
    map_key_to_camera_action,
    wheel_steps_from_delta,
)


@pytest.mark.parametrize(
    "character, expected",
    [
        ("w", CameraAction.MOVE_FORWARD),
        ("W", CameraAction.MOVE_FORWARD),
        ("s", CameraAction.MOVE_BACKWARD),
        ("S", CameraAction.MOVE_BACKWARD),
        ("a", CameraAction.MOVE_LEFT),
        ("A", CameraAction.MOVE_LEFT),
        ("d", CameraAction.MOVE_RIGHT),
        ("D", CameraAction.MOVE_RIGHT),
        ("x", None),
    ],
)
def test_character_keys(character, expected):
    assert map_key_to_camera_action(character=character) is expected


def test_space_and_alt_keys():
    assert map_key_to_camera_action(named="Space") is CameraAction.MOVE_UP
    assert map_key_to_camera_action(named="Alt", physical="AltLeft") is CameraAction.MOVE_DOWN
    assert map_key_to_camera_action(physical="AltRight") is None


def test_character_key_ignores_physical():
    assert map_key_to_camera_action(character="q", physical="AltLeft") is None


def test_wheel_steps():
    assert wheel_steps_from_delta(line_y=1.0) == 1.0
    assert wheel_steps_from_delta(pixel_y=120.0) == pytest.approx(1.0)
    assert wheel_steps_from_delta(line_y=0.0) is None
    assert wheel_steps_from_delta(pixel_y=0.0) is None


def test_wheel_steps_requires_exactly_one():
    with pytest.raises(ValueError):
        wheel_steps_from_delta()
    with pytest.raises(ValueError):
        wheel_steps_from_delta(line_y=1.0, pixel_y=1.0)


def test_press_release_and_clear():
    controller = CameraController()
    assert controller.handle_event(ActionInput(CameraAction.MOVE_LEFT, True))
    assert controller.is_pressed(CameraAction.MOVE_LEFT)
    controller.handle_event(ActionInput(CameraAction.MOVE_LEFT, False))
    assert not controller.is_pressed(CameraAction.MOVE_LEFT)

    controller.handle_event(ActionInput(CameraAction.MOVE_UP, True))
    controller.handle_event(MouseDelta(3.0, 4.0))
    controller.handle_event(MouseWheel(1.5))
    controller.handle_event(ClearInput())
    assert controller.pressed == set()
    assert controller.mouse_delta == (0.0, 0.0)
    assert controller.wheel_steps == 0.0


def test_unknown_event_is_ignored():
    controller = CameraController()
    assert controller.handle_event("close") is False
    assert controller.pressed == set()


def test_mouse_delta_accumulates():
    controller = CameraController()
    controller.handle_event(MouseDelta(1.0, 2.0))
    controller.handle_event(MouseDelta(0.5, -1.0))
    assert controller.mouse_delta == (1.5, 1.0)


def test_move_forward_is_horizontal_with_speed_length():
    controller = CameraController()
    controller.handle_event(ActionInput(CameraAction.MOVE_FORWARD, True))
    step = controller.move_step((0.0, -1.0, -1.0), (1.0, 0.0, 0.0), 0.5)
    assert step[1] == 0.0
    assert step[0] == pytest.approx(0.0)
    assert step[2] < 0.0
    assert math.hypot(*step) == pytest.approx(controller.move_speed * 0.5)


def test_opposite_keys_cancel():
    controller = CameraController()
    controller.handle_event(ActionInput(CameraAction.MOVE_FORWARD, True))
    controller.handle_event(ActionInput(CameraAction.MOVE_BACKWARD, True))
    assert controller.move_step((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), 1.0) == (0.0, 0.0, 0.0)


def test_no_movement_for_non_positive_dt():
    controller = CameraController()
    controller.handle_event(ActionInput(CameraAction.MOVE_UP, True))
    assert controller.move_step((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), 0.0) == (0.0, 0.0, 0.0)
    up = controller.move_step((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), 1.0)
    assert up[1] == pytest.approx(controller.move_speed)


def test_left_is_opposite_of_right():
    controller = CameraController()
    controller.handle_event(ActionInput(CameraAction.MOVE_RIGHT, True))
    right = controller.move_step((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), 1.0)
    controller.handle_event(ActionInput(CameraAction.MOVE_RIGHT, False))
    controller.handle_event(ActionInput(CameraAction.MOVE_LEFT, True))
    left = controller.move_step((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), 1.0)
    assert left == pytest.approx(tuple(-c for c in right))


def test_rotation_yaw_and_consumption():
    controller = CameraController()
    controller.handle_event(MouseDelta(10.0, 0.0))
    rotated = controller.apply_rotation((0.2, 1.0, 0.0))
    assert rotated[0] == 0.2
    assert rotated[1] < 1.0
    assert controller.mouse_delta == (0.0, 0.0)
    assert controller.apply_rotation(rotated) == rotated


def test_pitch_is_clamped():
    controller = CameraController()
    controller.handle_event(MouseDelta(0.0, 100000.0))
    assert controller.apply_rotation((0.0, 0.0, 0.0))[0] == -1.55
    controller.handle_event(MouseDelta(0.0, -100000.0))
    assert controller.apply_rotation((0.0, 0.0, 0.0))[0] == 1.55


def test_zoom_narrows_and_consumes():
    controller = CameraController()
    assert controller.zoomed_fov(45.0) is None
    controller.handle_event(MouseWheel(1.0))
    narrowed = controller.zoomed_fov(45.0)
    assert narrowed < 45.0
    assert narrowed == pytest.approx(45.0 - controller.zoom_sensitivity_degrees)
    assert controller.zoomed_fov(45.0) is None
    controller.handle_event(MouseWheel(-1.0))
    assert controller.zoomed_fov(45.0) > 45.0