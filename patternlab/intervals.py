import typing


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
}


# Styles not listed here (including "lofi") use the natural minor scale.
STYLE_SCALES: typing.Dict[str, str] = {
	"pop": "major",
	"jazz": "dorian",
	"funk": "mixolydian",
}

DEFAULT_SCALE = "minor"

STYLES: typing.Tuple[str, ...] = ("lofi", "jazz", "pop", "funk")


def get_intervals (name: str) -> typing.List[int]:

	"""
	Return a named scale from the registry.
	"""

	if name not in SCALE_INTERVALS:
		raise ValueError(f"Unknown scale: {name}")

	return list(SCALE_INTERVALS[name])


def scale_for_style (style: str) -> typing.List[int]:

	"""Return the scale intervals a musical style is written in.

	Parameters:
		style: Style name, case-insensitive (``"lofi"``, ``"jazz"``, ``"pop"``, ``"funk"``).

	Example:
		```python
		scale_for_style("Jazz")  # → [0, 2, 3, 5, 7, 9, 10] (dorian)
		```
	"""

	return get_intervals(STYLE_SCALES.get(style.lower(), DEFAULT_SCALE))


def degree_to_pitch (root: int, degree: int, scale: typing.Sequence[int]) -> int:

	"""Convert a scale degree to a MIDI pitch.

	Degrees past the end of the scale climb into the next octave:
	``root + 12 * (degree // len(scale)) + scale[degree % len(scale)]``.

	Example:
		```python
		major = get_intervals("major")
		degree_to_pitch(60, 0, major)  # → 60
		degree_to_pitch(60, 9, major)  # → 76 (E5)
		```
	"""

	size = len(scale)

	return root + 12 * (degree // size) + scale[degree % size]
