import asyncio
import io
import pathlib

import mido
import pytest

import conftest
import patternlab.__main__
import patternlab.config
import patternlab.playback
import patternlab.session


def _make_session (**settings_kwargs) -> patternlab.session.Session:

	"""A session on a manual clock with a recording synthesizer."""

	settings = patternlab.config.Settings(seed=settings_kwargs.pop("seed", 3), **settings_kwargs)
	clock = conftest.ManualClock()

	return patternlab.session.Session(
		settings,
		context_factory = lambda: patternlab.playback.PlaybackContext(clock),
		synth_factory = conftest.RecordingSynth
	)


def test_session_generates_on_creation () -> None:

	session = _make_session(style="funk", instrument="lead", pattern_bars=2, density=100)

	assert session.pattern.instrument == "lead"
	assert session.pattern.length_bars == 2
	assert len(session.pattern.notes) == 16


def test_seeded_sessions_match () -> None:

	assert _make_session(seed=8).pattern == _make_session(seed=8).pattern


def test_generate_overrides_settings () -> None:

	session = _make_session()
	pattern = session.generate(instrument="chords", key="A", bars=1, density=0)

	assert session.pattern is pattern
	assert (session.instrument, session.key, session.pattern_bars) == ("chords", "A", 1)
	assert pattern.notes == ()


def test_invalid_bpm () -> None:

	with pytest.raises(ValueError):
		_make_session(bpm=0)

	with pytest.raises(ValueError):
		_make_session().set_bpm(-5)


@pytest.mark.parametrize("source, tracks", [("drums", 1), ("pattern", 1), ("chords", 1), ("composition", 3)])
def test_export_sources (source: str, tracks: int) -> None:

	session = _make_session(bpm=90)
	session.drum_grid.set(0, 0, True)

	midi = mido.MidiFile(file=io.BytesIO(session.export(source)))

	assert len(midi.tracks) == tracks
	assert [message.tempo for track in midi.tracks for message in track if message.type == "set_tempo"] == [666_667]


def test_export_unknown_source () -> None:

	with pytest.raises(ValueError, match="Unknown export source"):
		_make_session().export("vocals")


def test_save_uses_default_names (tmp_path: pathlib.Path) -> None:

	session = _make_session(style="Jazz", instrument="bass", export_directory=str(tmp_path / "exports"))

	drums = session.save(source="drums")
	pattern = session.save(source="pattern")
	chords = session.save(source="chords")
	composition = session.save(source="composition")

	assert drums == tmp_path / "exports" / "drum_sequence.mid"
	assert pattern.name == "jazz_bass.mid"
	assert chords.name == "chord_progression.mid"
	assert composition.name == "composition.mid"
	assert drums.read_bytes()[:4] == b"MThd"


def test_save_to_explicit_path (tmp_path: pathlib.Path) -> None:

	target = tmp_path / "nested" / "beat.mid"

	assert _make_session().save(target) == target
	assert target.exists()


@pytest.mark.asyncio
async def test_start_and_stop_play_the_session_state () -> None:

	session = _make_session()
	session.drum_grid.set(0, 0, True)

	await session.start("drums")

	scheduler = session.scheduler
	assert scheduler.state == "running"
	assert scheduler.drum_grid is session.drum_grid
	assert scheduler.progression is session.progression
	assert session.context.state == "running"
	assert scheduler.synth.drums == [("kick", 0.05)]

	session.set_bpm(60)
	assert scheduler.tempo == 60

	await session.stop()
	assert scheduler.state == "stopped"

	session.close()
	assert session.scheduler is None
	assert session.context is None


@pytest.mark.asyncio
async def test_regenerating_updates_the_running_pattern () -> None:

	session = _make_session()
	await session.start("pattern")

	pattern = session.generate(instrument="lead")

	assert session.scheduler.pattern is pattern
	assert session.scheduler.instrument == "lead"

	await session.stop()
	session.close()


@pytest.mark.asyncio
async def test_start_failure_is_reported () -> None:

	session = patternlab.session.Session(
		patternlab.config.Settings(seed=1),
		context_factory = lambda: conftest.FailingContext(patternlab.playback.AudioDeviceError("no outputs")),
		synth_factory = conftest.RecordingSynth
	)

	with pytest.raises(patternlab.playback.AudioDeviceError):
		await session.start("drums")

	assert session.scheduler.state == "stopped"
	session.close()


@pytest.mark.asyncio
async def test_run_stops_when_the_event_is_set () -> None:

	session = _make_session()
	session.display()
	stop_event = asyncio.Event()

	task = asyncio.create_task(session.run("chords", stop_event))
	await asyncio.sleep(0.01)

	assert session.scheduler.state == "running"
	assert session._display is not None
	assert session._display.lines[0].endswith("Chord: Cm7")

	stop_event.set()
	await task

	assert session.scheduler.state == "stopped"
	session.close()


def test_from_config (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("sequencer:\n  bpm: 100\ngenerator:\n  seed: 4\n")

	session = patternlab.session.Session.from_config(str(path), synth_factory=conftest.RecordingSynth)

	assert session.bpm == 100
	assert session.settings.seed == 4


def test_cli_export (tmp_path: pathlib.Path) -> None:

	config = tmp_path / "config.yaml"
	config.write_text("export:\n  directory: " + str(tmp_path / "out") + "\n")

	assert patternlab.__main__.main(["--config", str(config), "export", "--source", "chords"]) == 0
	assert (tmp_path / "out" / "chord_progression.mid").exists()


def test_cli_play_without_device (tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:

	monkeypatch.setattr(mido, "get_output_names", lambda: [])

	assert patternlab.__main__.main(["--config", str(tmp_path / "none.yaml"), "play", "--mode", "drums"]) == 1


def test_cli_generator_overrides (tmp_path: pathlib.Path) -> None:

	config = tmp_path / "config.yaml"
	config.write_text("export:\n  directory: " + str(tmp_path) + "\n")

	argv = ["--config", str(config), "--style", "funk", "--instrument", "lead", "--density", "100", "export"]

	assert patternlab.__main__.main(argv) == 0

	midi = mido.MidiFile(tmp_path / "funk_lead.mid")
	assert sum(1 for message in midi.tracks[0] if message.type == "note_on") == 32


def test_composition_melodic_track_choice () -> None:

	session = _make_session(instrument="lead", density=100)

	chords = mido.MidiFile(file=io.BytesIO(session.export("composition")))
	pattern = mido.MidiFile(file=io.BytesIO(session.export("composition", melodic="pattern")))

	chord_ons = [message.note for message in chords.tracks[2] if message.type == "note_on"]
	pattern_ons = [message.note for message in pattern.tracks[2] if message.type == "note_on"]

	assert chord_ons[:4] == [60, 63, 67, 70]
	assert pattern_ons == [note.pitch for note in session.pattern.notes]

	with pytest.raises(ValueError, match="Unknown melodic source"):
		session.export("composition", melodic="drums")


def test_cli_composition_with_pattern (tmp_path: pathlib.Path) -> None:

	config = tmp_path / "config.yaml"
	config.write_text("generator:\n  instrument: lead\n  density: 100\n")
	output = tmp_path / "song.mid"

	argv = ["--config", str(config), "export", "--source", "composition", "--melodic", "pattern", "--output", str(output)]

	assert patternlab.__main__.main(argv) == 0
	assert sum(1 for message in mido.MidiFile(output).tracks[2] if message.type == "note_on") == 32


@pytest.mark.asyncio
async def test_closing_after_playback_leaves_no_note_hanging (patch_midi: list) -> None:

	"""Chord pads still sounding when the session closes get their note-offs."""

	session = patternlab.session.Session(patternlab.config.Settings(seed=2))
	stop_event = asyncio.Event()

	task = asyncio.create_task(session.run("chords", stop_event))
	await asyncio.sleep(0.2)

	stop_event.set()
	await task
	session.close()

	port = patch_midi[0]
	ons = [message.note for message in port.sent if message.type == "note_on"]
	offs = [message.note for message in port.sent if message.type == "note_off"]

	assert sorted(ons) == [60, 63, 67, 70]
	assert sorted(offs) == sorted(ons)
	assert port.panicked
	assert port.closed
