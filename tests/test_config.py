import pathlib

import pytest

import patternlab.chords
import patternlab.config


def test_missing_file_gives_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	settings = patternlab.config.load_config(str(tmp_path / "absent.yaml"))

	assert settings == patternlab.config.Settings()
	assert settings.progression == patternlab.chords.DEFAULT_PROGRESSION
	assert "not found" in caplog.text


def test_empty_file_gives_defaults (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("")

	assert patternlab.config.load_config(str(path)) == patternlab.config.Settings()


def test_sections_map_onto_settings (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text(
		"sequencer:\n"
		"  bpm: 96\n"
		"  schedule_ahead: 0.2\n"
		"drums:\n"
		"  bars: 2\n"
		"generator:\n"
		"  style: jazz\n"
		"  instrument: lead\n"
		"  key: Eb\n"
		"  bars: 8\n"
		"  density: 75\n"
		"  seed: 11\n"
		"chords:\n"
		"  progression: [\"D minor_7th\", \"G\"]\n"
		"midi:\n"
		"  device_name: Synth 1\n"
		"export:\n"
		"  directory: out\n"
	)

	settings = patternlab.config.load_config(str(path))

	assert settings.bpm == 96
	assert settings.schedule_ahead == 0.2
	assert settings.interval == 0.025
	assert settings.drum_bars == 2
	assert (settings.style, settings.instrument, settings.key) == ("jazz", "lead", "Eb")
	assert (settings.pattern_bars, settings.density, settings.seed) == (8, 75, 11)
	assert settings.progression == [("D", "minor_7th"), ("G", "major")]
	assert settings.device_name == "Synth 1"
	assert settings.export_directory == "out"


def test_unknown_keys_are_skipped (caplog: pytest.LogCaptureFixture) -> None:

	settings = patternlab.config.apply_config(
		patternlab.config.Settings(),
		{"sequencer": {"bpm": 140, "swing": 0.2}, "visuals": "on"}
	)

	assert settings.bpm == 140
	assert "sequencer.swing" in caplog.text
	assert "'visuals'" in caplog.text


def test_top_level_must_be_a_mapping (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("- 1\n- 2\n")

	with pytest.raises(ValueError, match="mapping"):
		patternlab.config.load_config(str(path))


def test_empty_progression_in_config () -> None:

	settings = patternlab.config.apply_config(patternlab.config.Settings(), {"chords": {"progression": []}})

	assert settings.progression == []
