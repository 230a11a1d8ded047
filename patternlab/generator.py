"""Procedural pattern generation.

Turns high-level musical settings (style, instrument, key, length, density)
into a concrete list of notes.  Generation is intentionally stochastic: two
calls with the same settings usually differ, but every result respects the
structure of its instrument:

- **bass** - a root on the first step of every bar, a likely root on beat
  three, and sparse consonant fills (unison, third, fifth, seventh, octave).
- **chords** - stacked diatonic triads on half-bar boundaries.
- **lead** - a bounded random walk over two octaves of the scale.

Pass a seeded ``random.Random`` as ``rng`` for repeatable output.
"""

import logging
import random
import typing

import patternlab.chords
import patternlab.constants
import patternlab.constants.velocity
import patternlab.intervals
import patternlab.pattern
from patternlab.pattern import Note


logger = logging.getLogger(__name__)


BASS_OCTAVE_BASE = 36		# C2
UPPER_OCTAVE_BASE = 60		# C4

BASS_BEAT_THREE_PROBABILITY = 0.8
BASS_FILL_DEGREES: typing.Tuple[int, ...] = (0, 2, 4, 6, 7)

CHORD_STRIDE = 8
CHORD_DURATION = 8

LEAD_STRIDE = 2
LEAD_DURATION = 2
LEAD_MAX_MOVE = 2


def _root_pitch_class (root_key: typing.Union[str, int]) -> int:

	if isinstance(root_key, int):
		return root_key % 12

	try:
		return patternlab.chords.key_name_to_pc(root_key)
	except ValueError:
		logger.warning(f"Unknown root key {root_key!r}, generating in C")
		return 0


def _generate_bass (steps: int, root: int, scale: typing.List[int], density: int, rng: random.Random) -> typing.List[Note]:

	notes: typing.List[Note] = []
	bar = patternlab.constants.STEPS_PER_BAR
	beat_three = 2 * patternlab.constants.STEPS_PER_BEAT

	for step in range(steps):

		degree = 0
		play = False

		if step % bar == 0:
			play = True

		elif step % bar == beat_three and rng.random() < BASS_BEAT_THREE_PROBABILITY:
			play = True

		elif rng.random() * 100 < density * 0.5:
			play = True
			degree = rng.choice(BASS_FILL_DEGREES)

		if play:
			notes.append(Note(
				pitch = patternlab.intervals.degree_to_pitch(root, degree, scale),
				start = step,
				duration = rng.randint(1, 2),
				velocity = patternlab.constants.velocity.BASS_VELOCITY
			))

	return notes


def _generate_chords (steps: int, root: int, scale: typing.List[int], density: int, rng: random.Random) -> typing.List[Note]:

	notes: typing.List[Note] = []

	for step in range(0, steps, CHORD_STRIDE):

		if rng.random() * 100 >= density:
			continue

		chord_root = rng.randint(0, 3)

		# Root, third and fifth: every other scale degree.
		for degree in (chord_root, chord_root + 2, chord_root + 4):
			notes.append(Note(
				pitch = patternlab.intervals.degree_to_pitch(root, degree, scale),
				start = step,
				duration = CHORD_DURATION,
				velocity = patternlab.constants.velocity.CHORD_VELOCITY
			))

	return notes


def _generate_lead (steps: int, root: int, scale: typing.List[int], density: int, rng: random.Random) -> typing.List[Note]:

	notes: typing.List[Note] = []
	span = 2 * len(scale)
	cursor = 0

	for step in range(0, steps, LEAD_STRIDE):

		if rng.random() * 100 >= density:
			continue

		cursor += rng.randint(-LEAD_MAX_MOVE, LEAD_MAX_MOVE)

		notes.append(Note(
			pitch = patternlab.intervals.degree_to_pitch(root, abs(cursor) % span, scale),
			start = step,
			duration = LEAD_DURATION,
			velocity = patternlab.constants.velocity.LEAD_VELOCITY
		))

	return notes


def generate_notes (
	style: str,
	instrument: str,
	root_key: typing.Union[str, int],
	length_bars: int,
	density: int,
	rng: typing.Optional[random.Random] = None
) -> typing.List[Note]:

	"""Generate a note list for one instrument.

	Parameters:
		style: ``"lofi"``, ``"jazz"``, ``"pop"`` or ``"funk"`` - selects the scale.
			Unknown styles use natural minor.
		instrument: ``"bass"``, ``"chords"`` or ``"lead"``.  Unknown names generate a lead.
		root_key: Key name (``"C"``, ``"F#"``, ``"Bb"``) or pitch class 0-11.
		length_bars: Pattern length in bars.  Zero or negative gives an empty list.
		density: 0-100, how busy the pattern is.  Values outside the range are clamped.
		rng: Random source.  Defaults to a fresh unseeded ``random.Random``.

	Returns:
		Notes ordered by start step.

	Example:
		```python
		notes = generate_notes("jazz", "bass", "D", length_bars=2, density=60, rng=random.Random(7))
		```
	"""

	if rng is None:
		rng = random.Random()

	density = max(0, min(100, density))
	steps = max(0, length_bars) * patternlab.constants.STEPS_PER_BAR
	scale = patternlab.intervals.scale_for_style(style)
	instrument = instrument.lower()

	base = BASS_OCTAVE_BASE if instrument == "bass" else UPPER_OCTAVE_BASE
	root = base + _root_pitch_class(root_key)

	if instrument == "bass":
		notes = _generate_bass(steps, root, scale, density, rng)
	elif instrument == "chords":
		notes = _generate_chords(steps, root, scale, density, rng)
	else:
		notes = _generate_lead(steps, root, scale, density, rng)

	notes.sort(key=lambda note: note.start)

	logger.debug(f"Generated {len(notes)} {instrument} notes ({style}, {root_key}, {length_bars} bars, density {density})")

	return notes


def generate_pattern (
	style: str,
	instrument: str,
	root_key: typing.Union[str, int],
	length_bars: int,
	density: int,
	rng: typing.Optional[random.Random] = None
) -> patternlab.pattern.GeneratedPattern:

	"""
	Generate notes and wrap them with the settings that produced them.
	"""

	notes = generate_notes(style, instrument, root_key, length_bars, density, rng)

	return patternlab.pattern.GeneratedPattern(
		notes = tuple(notes),
		style = style,
		instrument = instrument.lower(),
		root_key = root_key if isinstance(root_key, str) else patternlab.chords.PC_TO_NOTE_NAME[root_key % 12],
		length_bars = length_bars,
		density = density
	)
