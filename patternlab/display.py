"""Plain-text views of the drum grid and chord progression.

The grid renders one row per drum track with the step cursor marked below::

	Kick        |X . . . X . . . X . . . X . . .|
	Snare       |. . . . X . . . . . . . X . . .|
	Closed Hat  |X X X X X X X X X X X X X X X X|
	Open Hat    |. . . . . . . . . . . . . . X .|
	            |        ^                      |

``StepDisplay`` follows a running scheduler and logs a status line at every
bar.  It reflects steps as they are scheduled, which is slightly ahead of
what is heard.
"""

import collections
import logging
import typing

import patternlab.chords
import patternlab.constants
import patternlab.drums

if typing.TYPE_CHECKING:
	from patternlab.scheduler import Scheduler


logger = logging.getLogger(__name__)


_LABEL_WIDTH = 12

# Status lines kept by StepDisplay; older ones are only in the log.
STATUS_HISTORY = 16


def render_grid (grid: patternlab.drums.DrumGrid, cursor: typing.Optional[int] = None) -> str:

	"""
	Render the drum grid as ASCII, with a ``^`` under the cursor step when given.
	"""

	lines: typing.List[str] = []

	for track in patternlab.drums.DRUM_TRACKS[:grid.track_count]:
		cells = " ".join("X" if active else "." for active in grid.row(track.index))
		lines.append(f"{track.display_name[:_LABEL_WIDTH - 1]:<{_LABEL_WIDTH}}|{cells}|")

	if cursor is not None and 0 <= cursor < grid.steps:
		marks = " ".join("^" if step == cursor else " " for step in range(grid.steps))
		lines.append(f"{'':<{_LABEL_WIDTH}}|{marks}|")

	return "\n".join(lines)


def render_progression (progression: patternlab.chords.ChordProgression, current_bar: typing.Optional[int] = None) -> str:

	"""
	Render chord names in order, bracketing the chord playing at *current_bar*.
	"""

	if not len(progression):
		return "(empty progression)"

	current = None if current_bar is None else current_bar % len(progression)

	names = [
		f"[{chord.name}]" if index == current else chord.name
		for index, chord in enumerate(progression.chords())
	]

	return " ".join(names)


class StepDisplay:

	"""
	Logs a one-line status for every bar the scheduler reaches.
	"""

	def __init__ (self, scheduler: "Scheduler") -> None:

		self.scheduler = scheduler
		self.cursor: typing.Optional[int] = None
		self.lines: typing.Deque[str] = collections.deque(maxlen=STATUS_HISTORY)


	def attach (self) -> None:

		self.scheduler.events.on("step", self.on_step)


	def detach (self) -> None:

		self.scheduler.events.off("step", self.on_step)


	def on_step (self, step: int, at_time: float) -> None:

		"""
		Track the cursor and log a status line on bar boundaries.
		"""

		self.cursor = step

		if step % patternlab.constants.STEPS_PER_BAR:
			return

		line = self.status_line(step)
		self.lines.append(line)
		logger.info(line)


	def status_line (self, step: int) -> str:

		scheduler = self.scheduler
		bar = step // patternlab.constants.STEPS_PER_BAR
		line = f"{scheduler.tempo:.0f} BPM  Bar: {bar + 1}  Mode: {scheduler.mode}"

		if scheduler.mode == "chords":
			chord = scheduler.progression.chord_at_bar(bar)
			if chord is not None:
				line += f"  Chord: {chord.name}"

		return line
