"""
Tests for raw event to command translation.
"""

import pytest

from netview.ui.events import (
    KeyEvent, PanDown, PanLeft, PanRight, PanUp, PointerButton, PointerDown,
    PointerDrag, PointerMove, PointerUp, Quit, Reset, Resize, ResizeEvent,
    ZoomIn, ZoomOut,
)
from netview.ui.input_controller import InputController


class ScriptedPoll:
    """Yields queued events, then None; records every timeout it was given."""

    def __init__(self, events):
        self.events = list(events)
        self.timeouts = []

    def __call__(self, timeout):
        self.timeouts.append(timeout)
        return self.events.pop(0) if self.events else None


def controller_for(events, **kwargs):
    poll = ScriptedPoll(events)
    return InputController(poll, **kwargs), poll


class TestTranslate:

    @pytest.fixture
    def controller(self):
        return InputController(lambda timeout: None, pan_step=10.0)

    @pytest.mark.parametrize("key,command", [
        ('q', Quit()),
        ('Q', Quit()),
        ('escape', Quit()),
        ('close', Quit()),
        ('up', PanUp(10.0)),
        ('down', PanDown(10.0)),
        ('left', PanLeft(10.0)),
        ('right', PanRight(10.0)),
        ('+', ZoomIn()),
        ('=', ZoomIn()),
        ('-', ZoomOut()),
        ('r', Reset()),
    ])
    def test_keys(self, controller, key, command):
        assert controller.translate(KeyEvent(key)) == command

    def test_unknown_key_dropped(self, controller):
        assert controller.translate(KeyEvent('x')) is None

    def test_primary_button(self, controller):
        assert controller.translate(PointerButton((3, 4), pressed=True)) == PointerDown((3, 4))
        assert controller.translate(PointerButton((3, 4), pressed=False)) == PointerUp((3, 4))

    def test_other_buttons_dropped(self, controller):
        assert controller.translate(PointerButton((3, 4), pressed=True, button=3)) is None

    def test_move_only_drags_while_held(self, controller):
        assert controller.translate(PointerMove((1, 1), button_held=True)) == PointerDrag((1, 1))
        assert controller.translate(PointerMove((1, 1))) is None

    def test_resize(self, controller):
        assert controller.translate(ResizeEvent((100, 40))) == Resize((100, 40))

    def test_custom_pan_step(self):
        controller = InputController(lambda timeout: None, pan_step=3.5)
        assert controller.translate(KeyEvent('left')) == PanLeft(3.5)


class TestPoll:

    def test_nothing_pending(self):
        controller, poll = controller_for([], timeout=0.05)
        assert controller.poll() == []
        assert poll.timeouts == [0.05]

    def test_first_poll_blocks_then_drains(self):
        controller, poll = controller_for([KeyEvent('+'), KeyEvent('x'), KeyEvent('left')], timeout=0.05)
        assert controller.poll() == [ZoomIn(), PanLeft(10.0)]
        assert poll.timeouts[0] == 0.05
        assert all(t == 0.0 for t in poll.timeouts[1:])

    def test_drain_bounded(self):
        controller, poll = controller_for([KeyEvent('+')] * 10, max_events=4)
        assert len(controller.poll()) == 4
        assert len(poll.events) == 6
        assert len(controller.poll()) == 4

    def test_draw_sequence(self):
        events = [
            PointerButton((5, 5), pressed=True),
            PointerMove((6, 5), button_held=True),
            PointerButton((6, 5), pressed=False),
        ]
        controller, _ = controller_for(events)
        assert controller.poll() == [PointerDown((5, 5)), PointerDrag((6, 5)), PointerUp((6, 5))]
