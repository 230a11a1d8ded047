import asyncio
import logging
import pathlib
import random
import signal
import typing

import patternlab.chords
import patternlab.config
import patternlab.display
import patternlab.drums
import patternlab.generator
import patternlab.midi_file
import patternlab.pattern
import patternlab.playback
import patternlab.scheduler


logger = logging.getLogger(__name__)


EXPORT_SOURCES: typing.Tuple[str, ...] = ("drums", "pattern", "chords", "composition")

# What a composition export carries on its melodic track.
MELODIC_SOURCES: typing.Tuple[str, ...] = ("chords", "pattern")


ContextFactory = typing.Callable[[], patternlab.playback.PlaybackContext]
SynthFactory = typing.Callable[[typing.Any], patternlab.playback.Synthesizer]


class Session:

	"""
	Everything one user works on: tempo, drum grid, chord progression and the
	generated pattern, plus playback and export of each.

	The playback context is created on the first ``start()`` and released by
	``close()``.  The scheduler reads the session's grid and progression
	objects directly, so edits made between scheduling passes are heard on the
	next pass.

	Example:
		```python
		session = Session()
		session.drum_grid.toggle(0, 0)
		session.generate(style="funk", instrument="lead")
		session.save("funk_lead.mid", source="pattern")
		session.play("drums")
		```
	"""

	def __init__ (
		self,
		settings: typing.Optional[patternlab.config.Settings] = None,
		context_factory: typing.Optional[ContextFactory] = None,
		synth_factory: typing.Optional[SynthFactory] = None
	) -> None:

		self.settings = settings if settings is not None else patternlab.config.Settings()

		if self.settings.bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = self.settings.bpm
		self.drum_grid = patternlab.drums.DrumGrid(self.settings.drum_bars)
		self.progression = patternlab.chords.ChordProgression(self.settings.progression)

		self.style = self.settings.style
		self.instrument = self.settings.instrument
		self.key = self.settings.key
		self.pattern_bars = self.settings.pattern_bars
		self.density = self.settings.density
		self.rng = random.Random(self.settings.seed)

		self._context_factory = context_factory or (lambda: patternlab.playback.MidiPlaybackContext(self.settings.device_name))
		self._synth_factory = synth_factory or patternlab.playback.MidiSynth

		self.context: typing.Optional[patternlab.playback.PlaybackContext] = None
		self.scheduler: typing.Optional[patternlab.scheduler.Scheduler] = None
		self._display_enabled = False
		self._display: typing.Optional[patternlab.display.StepDisplay] = None

		self.pattern = self.generate()


	@classmethod
	def from_config (cls, config_path: str = 'config.yaml', **kwargs: typing.Any) -> "Session":

		"""
		Build a session from a YAML config file (see :mod:`patternlab.config`).
		"""

		return cls(patternlab.config.load_config(config_path), **kwargs)


	def generate (
		self,
		style: typing.Optional[str] = None,
		instrument: typing.Optional[str] = None,
		key: typing.Optional[str] = None,
		bars: typing.Optional[int] = None,
		density: typing.Optional[int] = None
	) -> patternlab.pattern.GeneratedPattern:

		"""Generate a new pattern, replacing the current one.

		Arguments left as ``None`` keep the session's current setting.
		"""

		if style is not None:
			self.style = style
		if instrument is not None:
			self.instrument = instrument
		if key is not None:
			self.key = key
		if bars is not None:
			self.pattern_bars = bars
		if density is not None:
			self.density = density

		self.pattern = patternlab.generator.generate_pattern(
			self.style, self.instrument, self.key, self.pattern_bars, self.density, rng=self.rng
		)

		logger.info(f"Generated {len(self.pattern.notes)} notes: {self.style} {self.instrument} in {self.key}, {self.pattern_bars} bars")

		if self.scheduler is not None:
			self.scheduler.set_pattern(self.pattern)

		return self.pattern


	def display (self, enabled: bool = True) -> None:

		"""
		Log a status line (tempo, bar, chord) at every bar during playback.
		"""

		self._display_enabled = enabled


	def set_bpm (self, bpm: float) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = bpm

		if self.scheduler is not None:
			self.scheduler.set_tempo(bpm)


	# ------------------------------------------------------------------
	# Export
	# ------------------------------------------------------------------

	def export (self, source: str = "drums", melodic: str = "chords") -> bytes:

		"""Encode one source as a Standard MIDI File.

		Parameters:
			source: ``"drums"``, ``"pattern"`` or ``"chords"`` for a single-track
				file, or ``"composition"`` for tempo + drums + a melodic track in a
				format-1 file.
			melodic: For ``"composition"``, ``"chords"`` (the progression) or
				``"pattern"`` (the generated notes).
		"""

		if source == "drums":
			return patternlab.midi_file.export_drum_grid(self.drum_grid, bpm=self.bpm)

		if source == "pattern":
			return patternlab.midi_file.export_notes(self.pattern.notes, bpm=self.bpm)

		if source == "chords":
			return patternlab.midi_file.export_progression(self.progression, bpm=self.bpm)

		if source == "composition":

			if melodic not in MELODIC_SOURCES:
				raise ValueError(f"Unknown melodic source {melodic!r}. Available: {list(MELODIC_SOURCES)}")

			melodic_track = self.progression if melodic == "chords" else self.pattern.notes

			return patternlab.midi_file.export_composition(self.bpm, self.drum_grid, melodic_track)

		raise ValueError(f"Unknown export source {source!r}. Available: {list(EXPORT_SOURCES)}")


	def default_filename (self, source: str) -> str:

		if source == "drums":
			return f"drum_sequence{patternlab.midi_file.MIDI_FILE_EXTENSION}"

		if source == "pattern":
			return f"{self.style.lower()}_{self.instrument.lower()}{patternlab.midi_file.MIDI_FILE_EXTENSION}"

		if source == "chords":
			return f"chord_progression{patternlab.midi_file.MIDI_FILE_EXTENSION}"

		return f"composition{patternlab.midi_file.MIDI_FILE_EXTENSION}"


	def save (self, path: typing.Optional[typing.Union[str, pathlib.Path]] = None, source: str = "drums", melodic: str = "chords") -> pathlib.Path:

		"""
		Write *source* to *path*, or to the export directory under its default name.
		"""

		data = self.export(source, melodic)

		if path is None:
			target = pathlib.Path(self.settings.export_directory) / self.default_filename(source)
		else:
			target = pathlib.Path(path)

		target.parent.mkdir(parents=True, exist_ok=True)
		target.write_bytes(data)

		logger.info(f"Saved {source} ({len(data)} bytes) to {target}")

		return target


	# ------------------------------------------------------------------
	# Playback
	# ------------------------------------------------------------------

	def _ensure_scheduler (self) -> patternlab.scheduler.Scheduler:

		if self.scheduler is None:
			self.context = self._context_factory()
			self.scheduler = patternlab.scheduler.Scheduler(
				self.context,
				self._synth_factory(self.context),
				tempo = self.bpm,
				lead_in = self.settings.lead_in,
				schedule_ahead = self.settings.schedule_ahead,
				interval = self.settings.interval
			)

		self.scheduler.set_drum_grid(self.drum_grid)
		self.scheduler.set_progression(self.progression)
		self.scheduler.set_pattern(self.pattern)

		if self._display_enabled and self._display is None:
			self._display = patternlab.display.StepDisplay(self.scheduler)
			self._display.attach()

		return self.scheduler


	async def start (self, mode: str = "drums") -> None:

		"""
		Start playing *mode* (``"drums"``, ``"pattern"`` or ``"chords"``).

		Raises:
			AudioDeviceError: If the output device cannot be acquired.
		"""

		scheduler = self._ensure_scheduler()
		scheduler.set_mode(mode)

		await scheduler.start()


	async def stop (self) -> None:

		if self.scheduler is not None:
			await self.scheduler.stop()


	async def run (self, mode: str, stop_event: asyncio.Event) -> None:

		"""
		Play *mode* until *stop_event* is set.
		"""

		await self.start(mode)

		try:
			await stop_event.wait()
		finally:
			await self.stop()


	async def _play (self, mode: str) -> None:

		stop_event = asyncio.Event()
		loop = asyncio.get_running_loop()

		for sig in (signal.SIGINT, signal.SIGTERM):
			loop.add_signal_handler(sig, stop_event.set)

		logger.info("Playing. Press Ctrl+C to stop.")

		await self.run(mode, stop_event)


	def play (self, mode: str = "drums") -> None:

		"""
		Play *mode* in real time, blocking until interrupted.
		"""

		try:
			asyncio.run(self._play(mode))

		except KeyboardInterrupt:
			pass

		finally:
			self.close()


	def close (self) -> None:

		"""
		Release the playback context.  A later ``start()`` creates a fresh one.
		"""

		if self.context is not None:
			self.context.close()

		self.context = None
		self.scheduler = None
		self._display = None
