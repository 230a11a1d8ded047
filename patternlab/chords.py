"""Chord definitions, pitch class names and the chord progression.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to note names (sharps only)
- `CHORD_INTERVALS`: Maps chord quality names to interval lists (semitones from root)
- `CHORD_SUFFIX`: Maps chord quality names to human-readable suffixes (e.g., `"m"`, `"7"`)

A `ChordProgression` is an ordered list of `Chord` items.  Each chord occupies
exactly one bar (16 steps) when played or exported, in insertion order.
"""

import dataclasses
import itertools
import logging
import typing

import patternlab.constants


logger = logging.getLogger(__name__)


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]


def key_name_to_pc (key_name: str) -> int:

	"""Pitch class (0-11) of a root or key name.

	Sharps and flats are both accepted, so ``"A#"`` and ``"Bb"`` give 10.

	Raises:
		ValueError: For anything not in ``NOTE_NAME_TO_PC``.
	"""

	pc = NOTE_NAME_TO_PC.get(key_name)

	if pc is None:
		raise ValueError(f"Unknown key name: {key_name!r}. Expected a note name such as 'C', 'F#' or 'Bb'.")

	return pc


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 4, 7],
	"minor": [0, 3, 7],
	"dominant_7th": [0, 4, 7, 10],
	"major_7th": [0, 4, 7, 11],
	"minor_7th": [0, 3, 7, 10],
	"diminished": [0, 3, 6],
	"augmented": [0, 4, 8],
	"sus4": [0, 5, 7],
	"sus2": [0, 2, 7],
}

CHORD_SUFFIX: typing.Dict[str, str] = {
	"major": "",
	"minor": "m",
	"dominant_7th": "7",
	"major_7th": "maj7",
	"minor_7th": "m7",
	"diminished": "dim",
	"augmented": "+",
	"sus4": "sus4",
	"sus2": "sus2",
}


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	One entry of a chord progression: a root name and a chord quality.
	"""

	id: int
	root: str
	quality: str


	@property
	def root_pc (self) -> int:

		"""Pitch class of the root."""

		return key_name_to_pc(self.root)


	@property
	def name (self) -> str:

		"""
		Return a human-friendly chord name, e.g. ``"Cm7"``.
		"""

		return f"{PC_TO_NOTE_NAME[self.root_pc]}{CHORD_SUFFIX.get(self.quality, '')}"


	def intervals (self) -> typing.List[int]:

		"""
		Return the chord intervals for this chord quality.
		"""

		if self.quality not in CHORD_INTERVALS:
			raise ValueError(f"Unknown chord quality: {self.quality}")

		return list(CHORD_INTERVALS[self.quality])


	def tones (self, base: int = patternlab.constants.CHORD_BASE_PITCH) -> typing.List[int]:

		"""Return MIDI note numbers for the chord, stacked on the root's pitch class above *base*.

		``base`` is the C of the target octave, so ``Chord(root="F", ...)`` with the
		default base starts on F4 (65).

		Example:
			```python
			Chord(id=1, root="C", quality="minor_7th").tones()  # [60, 63, 67, 70]
			```
		"""

		root_pitch = base + self.root_pc

		return [root_pitch + interval for interval in self.intervals()]


class ChordProgression:

	"""
	An ordered sequence of chords, one per bar.

	The progression is edited incrementally (add, remove, clear) and read
	whole by the scheduler and the MIDI encoder.
	"""

	def __init__ (self, chords: typing.Optional[typing.Iterable[typing.Tuple[str, str]]] = None) -> None:

		"""
		Create a progression, optionally from ``(root, quality)`` pairs.
		"""

		self._chords: typing.List[Chord] = []
		self._ids = itertools.count(1)

		for root, quality in chords or []:
			self.add(root, quality)


	def add (self, root: str, quality: str) -> Chord:

		"""Append a chord to the end of the progression.

		Raises:
			ValueError: If *root* or *quality* is unknown.
		"""

		key_name_to_pc(root)

		if quality not in CHORD_INTERVALS:
			raise ValueError(f"Unknown chord quality: {quality!r}. Available: {sorted(CHORD_INTERVALS)}")

		chord = Chord(id=next(self._ids), root=root, quality=quality)
		self._chords.append(chord)

		logger.debug(f"Added chord {chord.name} (id {chord.id})")

		return chord


	def remove (self, chord_id: int) -> None:

		"""
		Remove the chord with the given id.  Unknown ids are ignored.
		"""

		self._chords = [chord for chord in self._chords if chord.id != chord_id]


	def clear (self) -> None:

		"""
		Remove every chord.
		"""

		self._chords = []


	def chords (self) -> typing.List[Chord]:

		"""
		Return a snapshot of the chords in playback order.
		"""

		return list(self._chords)


	def chord_at_bar (self, bar: int) -> typing.Optional[Chord]:

		"""
		Return the chord for *bar*, wrapping around the progression, or ``None`` when empty.
		"""

		if not self._chords:
			return None

		return self._chords[bar % len(self._chords)]


	@property
	def total_steps (self) -> int:

		"""
		Loop length in steps, falling back to one bar when the progression is empty.
		"""

		return (len(self._chords) or 1) * patternlab.constants.STEPS_PER_BAR


	def __len__ (self) -> int:

		return len(self._chords)


	def __iter__ (self) -> typing.Iterator[Chord]:

		return iter(list(self._chords))


def parse_chord_symbol (symbol: str) -> typing.Tuple[str, str]:

	"""Split a ``"ROOT QUALITY"`` string (as used in config files) into its parts.

	A bare root (``"F"``) is a major chord.

	Example:
		```python
		parse_chord_symbol("C minor_7th")  # → ("C", "minor_7th")
		```
	"""

	parts = symbol.split()

	if len(parts) == 1:
		return parts[0], "major"

	if len(parts) != 2:
		raise ValueError(f"Chord must be 'ROOT QUALITY', got {symbol!r}")

	return parts[0], parts[1]


DEFAULT_PROGRESSION: typing.List[typing.Tuple[str, str]] = [
	("C", "minor_7th"),
	("F", "major"),
	("G", "dominant_7th"),
	("C", "minor_7th"),
]
