import typing

import mido
import pytest

import patternlab.playback


class FakeMidiOut:

	"""MIDI output stub that records what it is sent."""

	def __init__ (self, name: str) -> None:

		self.name = name
		self.sent: typing.List[mido.Message] = []
		self.closed = False
		self.panicked = False


	def send (self, message: mido.Message) -> None:

		self.sent.append(message)


	def panic (self) -> None:

		self.panicked = True


	def close (self) -> None:

		self.closed = True


class ManualClock:

	"""Clock that only moves when a test moves it."""

	def __init__ (self) -> None:

		self.now = 0.0


	def __call__ (self) -> float:

		return self.now


	def advance (self, seconds: float) -> None:

		self.now += seconds


class RecordingSynth:

	"""Synthesizer that stores every intent it receives."""

	def __init__ (self, context: typing.Any = None) -> None:

		self.drums: typing.List[typing.Tuple[str, float]] = []
		self.notes: typing.List[typing.Tuple[int, float, str, float]] = []


	def trigger_drum (self, key: str, at_time: float) -> None:

		self.drums.append((key, at_time))


	def trigger_note (self, pitch: int, at_time: float, timbre: str, duration: float) -> None:

		self.notes.append((pitch, at_time, timbre, duration))


class FailingContext (patternlab.playback.PlaybackContext):

	"""Context whose device can never be acquired."""

	def __init__ (self, error: Exception) -> None:

		super().__init__(ManualClock())
		self.error = error


	async def _acquire (self) -> None:

		raise self.error


@pytest.fixture
def clock () -> ManualClock:

	return ManualClock()


@pytest.fixture
def context (clock: ManualClock) -> patternlab.playback.PlaybackContext:

	return patternlab.playback.PlaybackContext(clock)


@pytest.fixture
def synth () -> RecordingSynth:

	return RecordingSynth()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> typing.List[FakeMidiOut]:

	"""Patch mido to open fake output ports.  Returns the list of ports opened."""

	opened: typing.List[FakeMidiOut] = []

	def _fake_open_output (name: str) -> FakeMidiOut:
		port = FakeMidiOut(name)
		opened.append(port)
		return port

	monkeypatch.setattr(mido, "get_output_names", lambda: ["Dummy MIDI"])
	monkeypatch.setattr(mido, "open_output", _fake_open_output)

	return opened
