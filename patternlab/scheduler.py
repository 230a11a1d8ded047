"""Look-ahead playback scheduler.

The scheduler re-arms itself every ``interval`` seconds (25 ms by default)
on the asyncio event loop.  That wake-up is coarse and jittery, so it is
never used as the time base.  Instead each wake-up schedules every step
that falls within ``schedule_ahead`` seconds (100 ms) of the playback
context's clock, stamping each intent with the exact clock time it must
sound at.  As long as the re-arm interval is shorter than the look-ahead
window there is always audio queued, and timing accuracy depends only on
the clock, not on the event loop.

Step times are computed from an anchor, ``anchor + n * seconds_per_step``,
rather than by repeated addition, so long runs do not accumulate floating
point drift.  A tempo change moves the anchor to the next unscheduled step.

Configuration (tempo, mode, grid, pattern, progression) lives in fields the
scheduler owns.  Setters update them synchronously and the next pass reads
them whole.
"""

import asyncio
import logging
import typing

import patternlab.chords
import patternlab.constants
import patternlab.drums
import patternlab.event_emitter
import patternlab.pattern
import patternlab.playback


logger = logging.getLogger(__name__)


MODES: typing.Tuple[str, ...] = ("drums", "pattern", "chords")

DEFAULT_LEAD_IN = 0.05
DEFAULT_SCHEDULE_AHEAD = 0.1
DEFAULT_INTERVAL = 0.025

CHORD_TIMBRE = "pad"


class Scheduler:

	"""
	Real-time step sequencer with two states, ``"stopped"`` and ``"running"``.

	Events emitted through ``scheduler.events``:

	- ``"start"`` / ``"stop"`` - no arguments
	- ``"step"`` - ``(step, at_time)`` for each step as it is scheduled.  This is
	  up to ``schedule_ahead`` seconds before the step is heard, which is close
	  enough for a visual cursor.

	Example:
		```python
		context = patternlab.playback.MidiPlaybackContext()
		scheduler = Scheduler(context, patternlab.playback.MidiSynth(context), tempo=96)
		scheduler.set_drum_grid(grid)
		await scheduler.start()
		```
	"""

	def __init__ (
		self,
		context: patternlab.playback.PlaybackContext,
		synth: patternlab.playback.Synthesizer,
		tempo: float = 120,
		mode: str = "drums",
		lead_in: float = DEFAULT_LEAD_IN,
		schedule_ahead: float = DEFAULT_SCHEDULE_AHEAD,
		interval: float = DEFAULT_INTERVAL
	) -> None:

		"""
		Parameters:
			context: Owned clock and output device.
			synth: Receives the note intents.
			tempo: Beats per minute.
			mode: ``"drums"``, ``"pattern"`` or ``"chords"``.
			lead_in: Delay between ``start()`` and the first step, in seconds.
			schedule_ahead: How far ahead of the clock steps are scheduled, in seconds.
			interval: Re-arm period of the scheduling loop, in seconds.  Must be
				shorter than ``schedule_ahead``.
		"""

		if interval >= schedule_ahead:
			raise ValueError("Re-arm interval must be shorter than the schedule-ahead window")

		self.context = context
		self.synth = synth
		self.lead_in = lead_in
		self.schedule_ahead = schedule_ahead
		self.interval = interval

		self.events = patternlab.event_emitter.EventEmitter()
		self.task: typing.Optional[asyncio.Task] = None
		self.running = False

		self.tempo: float = 0
		self.mode = "drums"
		self.drum_grid = patternlab.drums.DrumGrid()
		self.pattern: typing.Optional[patternlab.pattern.GeneratedPattern] = None
		self.instrument = "bass"
		self.progression = patternlab.chords.ChordProgression()

		self.step = 0
		self._anchor_time = 0.0
		self._steps_since_anchor = 0

		self.set_tempo(tempo)
		self.set_mode(mode)


	@property
	def state (self) -> str:

		return "running" if self.running else "stopped"


	@property
	def seconds_per_step (self) -> float:

		"""``60 / (tempo * 4)`` - 0.125 s at 120 BPM."""

		return 60.0 / (self.tempo * patternlab.constants.STEPS_PER_BEAT)


	@property
	def next_event_time (self) -> float:

		"""Clock time of the next step to be scheduled."""

		return self._anchor_time + self._steps_since_anchor * self.seconds_per_step


	@property
	def total_steps (self) -> int:

		"""
		Loop length of the active source in steps (never zero).
		"""

		if self.mode == "drums":
			steps = self.drum_grid.steps
		elif self.mode == "pattern":
			steps = self.pattern.total_steps if self.pattern is not None else 0
		else:
			steps = self.progression.total_steps

		return steps or patternlab.constants.STEPS_PER_BAR


	def set_tempo (self, bpm: float) -> None:

		"""Change the tempo.

		While running, steps already handed to the synthesizer keep their times
		and the new tempo applies from the next step on.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		if self.running:
			self._anchor_time = self.next_event_time
			self._steps_since_anchor = 0

		self.tempo = bpm

		logger.info(f"BPM set to {self.tempo:.2f}")


	def set_mode (self, mode: str) -> None:

		"""Select which source plays: ``"drums"``, ``"pattern"`` or ``"chords"``."""

		if mode not in MODES:
			raise ValueError(f"Unknown playback mode {mode!r}. Available: {list(MODES)}")

		self.mode = mode


	def set_drum_grid (self, grid: patternlab.drums.DrumGrid) -> None:

		self.drum_grid = grid


	def set_pattern (self, pattern: typing.Optional[patternlab.pattern.GeneratedPattern]) -> None:

		"""
		Replace the generated pattern.  Its instrument also becomes the playback instrument.
		"""

		self.pattern = pattern

		if pattern is not None:
			self.instrument = pattern.instrument


	def set_instrument (self, instrument: str) -> None:

		self.instrument = instrument


	def set_progression (self, progression: patternlab.chords.ChordProgression) -> None:

		self.progression = progression


	async def start (self) -> None:

		"""Resume the context and start scheduling from step 0.

		Raises:
			AudioDeviceError: If the context cannot be resumed.  The scheduler
				stays stopped.
		"""

		if self.running:
			return

		try:
			await self.context.resume()

		except patternlab.playback.AudioDeviceError as exc:
			logger.error(f"Playback failed to start: {exc}")
			raise

		except Exception as exc:
			logger.error(f"Playback failed to start: {exc}")
			raise patternlab.playback.AudioDeviceError(str(exc)) from exc

		self.step = 0
		self._anchor_time = self.context.current_time + self.lead_in
		self._steps_since_anchor = 0
		self.running = True

		logger.info(f"Scheduler started ({self.mode}, {self.tempo:.2f} BPM)")
		self.events.emit("start")

		try:
			self.tick()
		except Exception:
			self.running = False
			raise

		self.task = asyncio.create_task(self._run_loop())


	async def stop (self) -> None:

		"""
		Stop scheduling.  Intents already handed to the synthesizer still play.
		"""

		if not self.running:
			return

		self.running = False

		if self.task is not None:
			self.task.cancel()

			try:
				await self.task
			except asyncio.CancelledError:
				pass

			self.task = None

		logger.info("Scheduler stopped")
		self.events.emit("stop")


	async def _run_loop (self) -> None:

		while self.running:
			await asyncio.sleep(self.interval)

			try:
				self.tick()

			except Exception:
				logger.exception("Scheduling pass failed, stopping playback")
				self.running = False
				self.events.emit("stop")


	def tick (self) -> int:

		"""Run one look-ahead pass.

		Schedules every step whose time falls before ``now + schedule_ahead``.

		Returns:
			The number of steps scheduled.
		"""

		if not self.running:
			return 0

		horizon = self.context.current_time + self.schedule_ahead
		scheduled = 0

		while self.next_event_time < horizon:
			self._schedule_step(self.step, self.next_event_time)
			self._steps_since_anchor += 1
			self.step = (self.step + 1) % self.total_steps
			scheduled += 1

		return scheduled


	def _schedule_step (self, step: int, at_time: float) -> None:

		"""
		Hand the intents for one step to the synthesizer.
		"""

		self.events.emit("step", step, at_time)

		if self.mode == "drums":
			self._schedule_drums(step, at_time)
		elif self.mode == "pattern":
			self._schedule_pattern(step, at_time)
		else:
			self._schedule_chords(step, at_time)


	def _schedule_drums (self, step: int, at_time: float) -> None:

		grid = self.drum_grid

		for track in patternlab.drums.DRUM_TRACKS[:grid.track_count]:
			if grid.is_active(track.index, step):
				self.synth.trigger_drum(track.synthesis_key, at_time)


	def _schedule_pattern (self, step: int, at_time: float) -> None:

		pattern = self.pattern

		if pattern is None:
			return

		timbre = patternlab.pattern.timbre_for_instrument(self.instrument)

		for note in pattern.notes_at(step):
			self.synth.trigger_note(note.pitch, at_time, timbre, note.duration * self.seconds_per_step)


	def _schedule_chords (self, step: int, at_time: float) -> None:

		# Chords change on bar boundaries only.
		if step % patternlab.constants.STEPS_PER_BAR:
			return

		chord = self.progression.chord_at_bar(step // patternlab.constants.STEPS_PER_BAR)

		if chord is None:
			return

		duration = patternlab.constants.STEPS_PER_BAR * self.seconds_per_step

		for pitch in chord.tones():
			self.synth.trigger_note(pitch, at_time, CHORD_TIMBRE, duration)
