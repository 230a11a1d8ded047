import pytest

import patternlab.event_emitter


def test_on_and_emit () -> None:

	"""Registered callbacks receive the emitted arguments."""

	emitter = patternlab.event_emitter.EventEmitter()
	received: list = []

	emitter.on("step", lambda step, at_time: received.append((step, at_time)))
	emitter.emit("step", 3, 0.425)

	assert received == [(3, 0.425)]


def test_listeners_run_in_registration_order () -> None:

	emitter = patternlab.event_emitter.EventEmitter()
	order: list = []

	emitter.on("start", lambda: order.append("a"))
	emitter.on("start", lambda: order.append("b"))
	emitter.emit("start")

	assert order == ["a", "b"]


def test_off_removes_only_the_target () -> None:

	emitter = patternlab.event_emitter.EventEmitter()
	a: list = []
	b: list = []

	def cb_a (value: int) -> None:
		a.append(value)

	def cb_b (value: int) -> None:
		b.append(value)

	emitter.on("tick", cb_a)
	emitter.on("tick", cb_b)
	emitter.off("tick", cb_a)
	emitter.emit("tick", 7)

	assert a == []
	assert b == [7]


def test_off_raises_for_unregistered_callback () -> None:

	emitter = patternlab.event_emitter.EventEmitter()

	with pytest.raises(ValueError):
		emitter.off("tick", lambda: None)


def test_async_listeners_are_rejected () -> None:

	emitter = patternlab.event_emitter.EventEmitter()

	async def listener () -> None:
		pass

	with pytest.raises(ValueError, match="synchronous"):
		emitter.on("stop", listener)


def test_failing_listener_does_not_stop_the_others (caplog: pytest.LogCaptureFixture) -> None:

	"""An exception in one listener is logged and the next listener still runs."""

	emitter = patternlab.event_emitter.EventEmitter()
	received: list = []

	def broken (value: int) -> None:
		raise RuntimeError("boom")

	emitter.on("tick", broken)
	emitter.on("tick", received.append)
	emitter.emit("tick", 1)

	assert received == [1]
	assert "Listener for 'tick' failed" in caplog.text


def test_emit_without_listeners_is_a_no_op () -> None:

	patternlab.event_emitter.EventEmitter().emit("nothing", 1, 2)
