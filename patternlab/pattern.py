import dataclasses
import typing

import patternlab.constants
import patternlab.constants.velocity


INSTRUMENTS: typing.Tuple[str, ...] = ("bass", "chords", "lead")

# Synthesizer timbre used to play each generated instrument.
INSTRUMENT_TIMBRES: typing.Dict[str, str] = {
	"bass": "bass",
	"chords": "piano",
	"lead": "lead",
}

TIMBRES: typing.Tuple[str, ...] = ("bass", "lead", "piano", "pad")


def timbre_for_instrument (instrument: str) -> str:

	"""
	Return the synthesizer timbre for a generated instrument (unknown names play as ``"piano"``).
	"""

	return INSTRUMENT_TIMBRES.get(instrument.lower(), "piano")


@dataclasses.dataclass(frozen=True)
class Note:

	"""
	A pitched note on the step grid.

	``start`` and ``duration`` are in sixteenth-note steps from the pattern
	origin.  A zero duration is accepted and exports as a note-on directly
	followed by its note-off.
	"""

	pitch: int
	start: int
	duration: int
	velocity: int = patternlab.constants.velocity.LEAD_VELOCITY


	def __post_init__ (self) -> None:

		if not 0 <= self.pitch <= 127:
			raise ValueError(f"Pitch must be 0-127, got {self.pitch}")

		if not patternlab.constants.velocity.MIN_VELOCITY <= self.velocity <= patternlab.constants.velocity.MAX_VELOCITY:
			raise ValueError(f"Velocity must be 0-127, got {self.velocity}")

		if self.start < 0:
			raise ValueError(f"Start step cannot be negative, got {self.start}")

		if self.duration < 0:
			raise ValueError(f"Duration cannot be negative, got {self.duration}")


@dataclasses.dataclass(frozen=True)
class GeneratedPattern:

	"""
	The result of one generation request.

	Patterns are never edited; generating again replaces the whole object.
	"""

	notes: typing.Tuple[Note, ...] = ()
	style: str = "lofi"
	instrument: str = "bass"
	root_key: str = "C"
	length_bars: int = 4
	density: int = 50

	_by_step: typing.Dict[int, typing.Tuple[Note, ...]] = dataclasses.field(init=False, repr=False, compare=False)


	def __post_init__ (self) -> None:

		by_step: typing.Dict[int, typing.List[Note]] = {}

		for note in self.notes:
			by_step.setdefault(note.start, []).append(note)

		object.__setattr__(self, "_by_step", {step: tuple(notes) for step, notes in by_step.items()})


	@property
	def total_steps (self) -> int:

		"""
		Loop length in steps, falling back to one bar for a non-positive length.
		"""

		return max(self.length_bars, 0) * patternlab.constants.STEPS_PER_BAR or patternlab.constants.STEPS_PER_BAR


	@property
	def timbre (self) -> str:

		return timbre_for_instrument(self.instrument)


	def notes_at (self, step: int) -> typing.Tuple[Note, ...]:

		"""
		Return the notes starting on ``step mod total_steps``, in generation order.
		"""

		return self._by_step.get(step % self.total_steps, ())
