"""Audio clock, output device and synthesizer boundary.

The scheduler never talks to hardware directly.  It reads time from a
``PlaybackContext`` (a monotonic clock plus the output device it guards) and
hands note intents to a ``Synthesizer``, which owns everything about how they
sound.

``MidiPlaybackContext`` and ``MidiSynth`` render those intents as MIDI note
messages on a mido output port, so any hardware or software synth can voice
the pattern.
"""

import asyncio
import logging
import time
import typing

import mido

import patternlab.constants
import patternlab.constants.gm_drums
import patternlab.constants.velocity
import patternlab.midi_utils


logger = logging.getLogger(__name__)


# How long a drum note is held when rendered as MIDI.
DRUM_GATE_SECONDS = 0.05

TIMBRE_VELOCITY: typing.Dict[str, int] = {
	"bass": patternlab.constants.velocity.BASS_VELOCITY,
	"lead": patternlab.constants.velocity.LEAD_VELOCITY,
	"piano": patternlab.constants.velocity.CHORD_VELOCITY,
	"pad": patternlab.constants.velocity.PAD_VELOCITY,
}


class AudioDeviceError (RuntimeError):

	"""
	The output device could not be acquired or resumed.
	"""


@typing.runtime_checkable
class Synthesizer (typing.Protocol):

	"""
	Fire-and-forget sound source driven by the scheduler.

	Times are in seconds on the playback context's clock.
	"""

	def trigger_drum (self, key: str, at_time: float) -> None:

		...


	def trigger_note (self, pitch: int, at_time: float, timbre: str, duration: float) -> None:

		...


class PlaybackContext:

	"""
	An owned audio clock with an explicit lifecycle.

	``current_time`` is monotonic seconds since the context was created.  The
	context starts ``"suspended"``; ``resume()`` acquires whatever device the
	subclass needs and moves it to ``"running"``; ``close()`` releases it for
	good.
	"""

	def __init__ (self, clock: typing.Callable[[], float] = time.perf_counter) -> None:

		self._clock = clock
		self._origin = clock()
		self.state = "suspended"


	@property
	def current_time (self) -> float:

		return self._clock() - self._origin


	async def resume (self) -> None:

		"""Make the context ready for playback.

		Raises:
			AudioDeviceError: If the context is closed or the device cannot be acquired.
		"""

		if self.state == "closed":
			raise AudioDeviceError("Playback context is closed")

		if self.state == "running":
			return

		await self._acquire()

		self.state = "running"
		logger.info("Playback context running")


	def close (self) -> None:

		"""
		Release the device.  The context cannot be resumed afterwards.
		"""

		if self.state == "closed":
			return

		self._release()
		self.state = "closed"
		logger.info("Playback context closed")


	async def _acquire (self) -> None:

		"""Hook for subclasses that hold a real device."""

		return None


	def _release (self) -> None:

		return None


class MidiPlaybackContext (PlaybackContext):

	"""
	Playback context backed by a mido output port.

	Delayed MIDI work is scheduled through ``schedule_at`` so the context knows
	what is still pending, and note-ons go through ``note_on`` so it knows
	which notes are sounding.  Closing the context cancels the pending work and
	silences every sounding note before the port is closed.
	"""

	def __init__ (self, device_name: typing.Optional[str] = None, clock: typing.Callable[[], float] = time.perf_counter) -> None:

		super().__init__(clock)

		self.device_name = device_name
		self.port: typing.Optional[typing.Any] = None

		self.active_notes: typing.Set[typing.Tuple[int, int]] = set()
		self._pending: typing.Set[asyncio.TimerHandle] = set()


	async def _acquire (self) -> None:

		if self.port is not None:
			return

		device_name, port = patternlab.midi_utils.select_output_device(self.device_name)

		if port is None:
			raise AudioDeviceError(f"Could not open MIDI output {self.device_name or '(auto)'}")

		self.device_name = device_name
		self.port = port


	def _release (self) -> None:

		for handle in self._pending:
			handle.cancel()

		self._pending.clear()
		self.panic()

		if self.port is not None:
			self.port.close()
			self.port = None


	def schedule_at (self, at_time: float, callback: typing.Callable[..., None], *args: typing.Any) -> None:

		"""
		Run *callback* on the event loop when the clock reaches *at_time* (immediately if already past).
		"""

		delay = max(0.0, at_time - self.current_time)
		handle: typing.Optional[asyncio.TimerHandle] = None

		def _fire () -> None:
			self._pending.discard(handle)
			callback(*args)

		handle = asyncio.get_running_loop().call_later(delay, _fire)
		self._pending.add(handle)


	def send (self, message: mido.Message) -> None:

		"""
		Send a message now.  Messages sent while no port is open are dropped.
		"""

		if self.port is None:
			return

		try:
			self.port.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def note_on (self, channel: int, note: int, velocity: int) -> None:

		self.active_notes.add((channel, note))
		self.send(mido.Message('note_on', channel=channel, note=note, velocity=velocity))


	def note_off (self, channel: int, note: int) -> None:

		self.active_notes.discard((channel, note))
		self.send(mido.Message('note_off', channel=channel, note=note, velocity=patternlab.constants.velocity.NOTE_OFF_VELOCITY))


	def panic (self) -> None:

		"""
		Send note_off for every sounding note, then the port's own all-notes-off.
		"""

		for channel, note in list(self.active_notes):
			self.note_off(channel, note)

		if self.port is None:
			return

		logger.info("Panic: sending all notes off.")

		try:
			self.port.panic()
		except Exception:
			logger.exception("MIDI panic failed (device may be disconnected)")


class MidiSynth:

	"""
	Synthesizer that plays intents as MIDI notes on a ``MidiPlaybackContext``.

	Each intent becomes a note-on at the requested clock time.  The matching
	note-off is scheduled from inside the note-on, so it can never overtake it,
	even for zero-length notes.  Drums use the GM percussion channel and the
	catalog's GM notes; everything else plays on channel 0.
	"""

	def __init__ (
		self,
		context: MidiPlaybackContext,
		drum_note_map: typing.Optional[typing.Dict[str, int]] = None,
		channel: int = patternlab.constants.MELODIC_CHANNEL
	) -> None:

		self.context = context
		self.drum_note_map = drum_note_map if drum_note_map is not None else patternlab.constants.gm_drums.GM_DRUM_MAP
		self.channel = channel


	def _play (self, channel: int, note: int, velocity: int, at_time: float, duration: float) -> None:

		self.context.schedule_at(at_time, self._start_note, channel, note, velocity, duration)


	def _start_note (self, channel: int, note: int, velocity: int, duration: float) -> None:

		self.context.note_on(channel, note, velocity)
		self.context.schedule_at(self.context.current_time + duration, self.context.note_off, channel, note)


	def trigger_drum (self, key: str, at_time: float) -> None:

		note = self.drum_note_map.get(key)

		if note is None:
			logger.warning(f"No MIDI note mapped for drum '{key}'")
			return

		self._play(patternlab.constants.DRUM_CHANNEL, note, patternlab.constants.velocity.DRUM_VELOCITY, at_time, DRUM_GATE_SECONDS)


	def trigger_note (self, pitch: int, at_time: float, timbre: str, duration: float) -> None:

		velocity = TIMBRE_VELOCITY.get(timbre, patternlab.constants.velocity.LEAD_VELOCITY)
		self._play(self.channel, pitch, velocity, at_time, duration)
