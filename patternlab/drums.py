"""The drum catalog and the step grid that plays it.

The catalog is fixed: four tracks, each with a synthesis key (what the
synthesizer is asked to play) and a General MIDI note (what is exported).
Only the grid cells are editable.
"""

import dataclasses
import logging
import typing

import patternlab.constants
import patternlab.constants.gm_drums


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DrumTrack:

	"""
	A row of the drum grid.
	"""

	index: int
	display_name: str
	synthesis_key: str
	midi_note: int
	display_color: str


DRUM_TRACKS: typing.Tuple[DrumTrack, ...] = (
	DrumTrack(0, "Kick", "kick", patternlab.constants.gm_drums.KICK_1, "orange"),
	DrumTrack(1, "Snare", "snare", patternlab.constants.gm_drums.SNARE_1, "cyan"),
	DrumTrack(2, "Closed Hat", "hi_hat_closed", patternlab.constants.gm_drums.HI_HAT_CLOSED, "yellow"),
	DrumTrack(3, "Open Hat", "hi_hat_open", patternlab.constants.gm_drums.HI_HAT_OPEN, "white"),
)


class DrumGrid:

	"""
	Boolean step grid with one row per drum track.

	All rows always have the same length, ``bars * 16``.
	"""

	def __init__ (self, bars: int = 1, track_count: int = len(DRUM_TRACKS)) -> None:

		if bars < 1:
			raise ValueError("Drum grid needs at least one bar")

		self.bars = bars
		self.track_count = track_count
		self._rows: typing.List[typing.List[bool]] = [[False] * self.steps for _ in range(track_count)]


	@property
	def steps (self) -> int:

		"""Row length in steps."""

		return self.bars * patternlab.constants.STEPS_PER_BAR


	def _check (self, track: int, step: int) -> None:

		if not 0 <= track < self.track_count:
			raise IndexError(f"Track {track} out of range (0-{self.track_count - 1})")

		if not 0 <= step < self.steps:
			raise IndexError(f"Step {step} out of range (0-{self.steps - 1})")


	def is_active (self, track: int, step: int) -> bool:

		"""
		Return whether a cell is on.  Cells outside the grid read as off.
		"""

		if not 0 <= track < self.track_count or not 0 <= step < len(self._rows[track]):
			return False

		return self._rows[track][step]


	def set (self, track: int, step: int, active: bool) -> None:

		"""Switch a cell on or off."""

		self._check(track, step)
		self._rows[track][step] = active


	def toggle (self, track: int, step: int) -> bool:

		"""Flip a cell and return its new state."""

		self._check(track, step)
		self._rows[track][step] = not self._rows[track][step]

		return self._rows[track][step]


	def row (self, track: int) -> typing.List[bool]:

		"""Return a copy of one track's row."""

		return list(self._rows[track])


	def rows (self) -> typing.List[typing.List[bool]]:

		"""Return a copy of every row."""

		return [list(row) for row in self._rows]


	def active_steps (self, track: int) -> typing.List[int]:

		"""Return the indices of the active cells of one track, in order."""

		return [step for step, active in enumerate(self._rows[track]) if active]


	def resize (self, bars: int) -> None:

		"""Change the bar count.

		Cells below ``min(old, new)`` keep their state and new cells start off.
		Existing content is never shifted.
		"""

		if bars < 1:
			raise ValueError("Drum grid needs at least one bar")

		target = bars * patternlab.constants.STEPS_PER_BAR
		self._rows = [row[:target] + [False] * max(0, target - len(row)) for row in self._rows]

		logger.debug(f"Drum grid resized from {self.bars} to {bars} bars")

		self.bars = bars


	def clear (self) -> None:

		"""Switch every cell off, keeping the bar count."""

		self._rows = [[False] * self.steps for _ in range(self.track_count)]
