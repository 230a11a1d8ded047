import pytest

import patternlab.intervals


@pytest.mark.parametrize("style, scale", [
	("pop", "major"),
	("jazz", "dorian"),
	("funk", "mixolydian"),
	("lofi", "minor"),
	("ambient", "minor"),
	("JAZZ", "dorian"),
])
def test_scale_for_style (style: str, scale: str) -> None:

	assert patternlab.intervals.scale_for_style(style) == patternlab.intervals.SCALE_INTERVALS[scale]


def test_get_intervals_returns_a_copy () -> None:

	intervals = patternlab.intervals.get_intervals("major")
	intervals.append(12)

	assert patternlab.intervals.get_intervals("major") == [0, 2, 4, 5, 7, 9, 11]


def test_get_intervals_unknown_scale () -> None:

	with pytest.raises(ValueError, match="Unknown scale"):
		patternlab.intervals.get_intervals("bebop")


def test_degree_to_pitch_climbs_octaves () -> None:

	major = patternlab.intervals.get_intervals("major")

	assert [patternlab.intervals.degree_to_pitch(60, degree, major) for degree in range(8)] == [60, 62, 64, 65, 67, 69, 71, 72]
	assert patternlab.intervals.degree_to_pitch(60, 9, major) == 76
	assert patternlab.intervals.degree_to_pitch(36, 13, major) == 59
