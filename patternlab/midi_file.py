"""Standard MIDI File encoder.

Builds SMF bytes directly so the output is byte-exact.  mido supplies the
tempo conversion only.  The file layout is:

	MThd | 00 00 00 06 | format | track count | division
	MTrk | payload length | <delta, status, note, velocity>... | 00 FF 2F 00

All multi-byte integers are big-endian and delta times are variable-length
quantities (VLQ).  Time is measured in ticks at 480 ticks per quarter note,
so one sixteenth-note step is 120 ticks.

Tracks are built independently (``track_chunk``, ``tempo_track``) and joined
by ``encode_file``.  The ``export_*`` helpers cover the common cases:

- one source per file (drum grid, note list or chord progression) as a
  single-track format-0 file
- a full composition as a format-1 file with a tempo track, a drum track and
  a melodic track

Example:
	```python
	data = export_drum_grid(grid, bpm=120)
	pathlib.Path("beat.mid").write_bytes(data)
	```
"""

import dataclasses
import logging
import struct
import typing

import mido

import patternlab.chords
import patternlab.constants
import patternlab.constants.velocity
import patternlab.drums
import patternlab.pattern


logger = logging.getLogger(__name__)


MIDI_MIME_TYPE = "audio/midi"
MIDI_FILE_EXTENSION = ".mid"

NOTE_ON = 0x90
NOTE_OFF = 0x80

META_EVENT = 0xFF
META_SET_TEMPO = 0x51
META_END_OF_TRACK = 0x2F

VLQ_MAX = 0x0FFFFFFF

HEADER_TAG = b"MThd"
TRACK_TAG = b"MTrk"


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	A channel-voice note event at an absolute tick.
	"""

	tick: int
	status: int		# NOTE_ON or NOTE_OFF, without the channel
	channel: int
	note: int
	velocity: int


	def to_bytes (self) -> bytes:

		"""Status byte with channel, then note and velocity."""

		return bytes((self.status | self.channel, self.note, self.velocity))


def encode_vlq (value: int) -> bytes:

	"""Encode a non-negative integer as a MIDI variable-length quantity.

	Seven bits per byte, most significant group first; every byte except the
	last has the continuation bit (0x80) set.

	Raises:
		ValueError: If *value* is negative or does not fit in four VLQ bytes.

	Example:
		```python
		encode_vlq(0)    # → b"\\x00"
		encode_vlq(300)  # → b"\\x82\\x2c"
		```
	"""

	if value < 0:
		raise ValueError(f"VLQ value cannot be negative, got {value}")

	if value > VLQ_MAX:
		raise ValueError(f"VLQ value {value} exceeds the SMF maximum of {VLQ_MAX}")

	groups = [value & 0x7F]
	value >>= 7

	while value:
		groups.append((value & 0x7F) | 0x80)
		value >>= 7

	return bytes(reversed(groups))


def decode_vlq (data: bytes, offset: int = 0) -> typing.Tuple[int, int]:

	"""Decode a variable-length quantity starting at *offset*.

	Returns:
		``(value, next_offset)`` where *next_offset* is the index of the first
		byte after the quantity.

	Raises:
		ValueError: If the data ends before the final (continuation-free) byte.
	"""

	value = 0

	for index in range(offset, len(data)):
		byte = data[index]
		value = (value << 7) | (byte & 0x7F)

		if not byte & 0x80:
			return value, index + 1

	raise ValueError("Truncated variable-length quantity")


def tempo_to_microseconds (bpm: float) -> int:

	"""
	Microseconds per quarter note for a tempo, as stored in a Set-Tempo event.
	"""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	return mido.bpm2tempo(bpm)


def set_tempo_event (bpm: float) -> bytes:

	"""
	Zero-delta Set-Tempo meta event: ``00 FF 51 03 tt tt tt``.
	"""

	micros = tempo_to_microseconds(bpm)

	return bytes((0x00, META_EVENT, META_SET_TEMPO, 0x03)) + micros.to_bytes(3, "big")


def end_of_track_event () -> bytes:

	return bytes((0x00, META_EVENT, META_END_OF_TRACK, 0x00))


def header_chunk (midi_format: int, track_count: int, division: int = patternlab.constants.TICKS_PER_QUARTER) -> bytes:

	"""
	The 14-byte ``MThd`` chunk.
	"""

	return HEADER_TAG + struct.pack(">IHHH", 6, midi_format, track_count, division)


def sort_events (events: typing.Iterable[NoteEvent]) -> typing.List[NoteEvent]:

	"""
	Order events by tick.  Events on the same tick keep the order they were pushed in.
	"""

	return sorted(events, key=lambda event: event.tick)


def track_chunk (events: typing.Iterable[NoteEvent], tempo_bpm: typing.Optional[float] = None) -> bytes:

	"""Encode one ``MTrk`` chunk.

	Parameters:
		events: Note events in any order; they are stably sorted by tick.
		tempo_bpm: When given, a Set-Tempo event is written at tick 0 before
			the notes.

	Returns:
		The chunk including its 8-byte header.
	"""

	payload = bytearray()

	if tempo_bpm is not None:
		payload += set_tempo_event(tempo_bpm)

	last_tick = 0

	for event in sort_events(events):
		payload += encode_vlq(event.tick - last_tick)
		payload += event.to_bytes()
		last_tick = event.tick

	payload += end_of_track_event()

	return TRACK_TAG + struct.pack(">I", len(payload)) + bytes(payload)


def tempo_track (bpm: float) -> bytes:

	"""
	A conductor track holding only the Set-Tempo event.
	"""

	return track_chunk([], tempo_bpm=bpm)


def encode_file (tracks: typing.Sequence[bytes], midi_format: typing.Optional[int] = None) -> bytes:

	"""Join independently built track chunks under a header.

	Parameters:
		tracks: Complete ``MTrk`` chunks (from :func:`track_chunk` / :func:`tempo_track`).
		midi_format: 0 or 1.  Defaults to 0 for a single track and 1 otherwise.

	Raises:
		ValueError: For an unsupported format, or format 0 with several tracks.
	"""

	if midi_format is None:
		midi_format = 0 if len(tracks) == 1 else 1

	if midi_format not in (0, 1):
		raise ValueError(f"Unsupported MIDI file format: {midi_format}")

	if midi_format == 0 and len(tracks) != 1:
		raise ValueError("Format 0 files hold exactly one track")

	return header_chunk(midi_format, len(tracks)) + b"".join(tracks)


# ---------------------------------------------------------------------------
# Event builders
# ---------------------------------------------------------------------------

def _note_pair (start_tick: int, duration_ticks: int, channel: int, note: int, velocity: int) -> typing.List[NoteEvent]:

	return [
		NoteEvent(start_tick, NOTE_ON, channel, note, velocity),
		NoteEvent(start_tick + duration_ticks, NOTE_OFF, channel, note, patternlab.constants.velocity.NOTE_OFF_VELOCITY),
	]


def drum_grid_events (grid: patternlab.drums.DrumGrid, hit_ticks: int = patternlab.constants.DRUM_HIT_TICKS) -> typing.List[NoteEvent]:

	"""
	One note pair per active cell on the percussion channel, track by track.
	"""

	events: typing.List[NoteEvent] = []

	for track in patternlab.drums.DRUM_TRACKS[:grid.track_count]:
		for step in grid.active_steps(track.index):
			events.extend(_note_pair(
				step * patternlab.constants.TICKS_PER_STEP,
				hit_ticks,
				patternlab.constants.DRUM_CHANNEL,
				track.midi_note,
				patternlab.constants.velocity.DRUM_VELOCITY
			))

	return events


def note_events (notes: typing.Iterable[patternlab.pattern.Note], channel: int = patternlab.constants.MELODIC_CHANNEL) -> typing.List[NoteEvent]:

	"""
	One note pair per note, using the note's own velocity.
	"""

	events: typing.List[NoteEvent] = []

	for note in notes:
		events.extend(_note_pair(
			note.start * patternlab.constants.TICKS_PER_STEP,
			note.duration * patternlab.constants.TICKS_PER_STEP,
			channel,
			note.pitch,
			note.velocity
		))

	return events


def progression_events (progression: patternlab.chords.ChordProgression, channel: int = patternlab.constants.MELODIC_CHANNEL) -> typing.List[NoteEvent]:

	"""
	Every chord sustained for one full bar, starting on its own bar.
	"""

	bar_ticks = patternlab.constants.STEPS_PER_BAR * patternlab.constants.TICKS_PER_STEP
	events: typing.List[NoteEvent] = []

	for bar, chord in enumerate(progression.chords()):
		for pitch in chord.tones():
			events.extend(_note_pair(
				bar * bar_ticks,
				bar_ticks,
				channel,
				pitch,
				patternlab.constants.velocity.PAD_VELOCITY
			))

	return events


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

def export_drum_grid (grid: patternlab.drums.DrumGrid, bpm: typing.Optional[float] = None) -> bytes:

	"""
	Single-track file of the drum grid on channel 9 (GM percussion).
	"""

	return encode_file([track_chunk(drum_grid_events(grid), tempo_bpm=bpm)])


def export_notes (notes: typing.Iterable[patternlab.pattern.Note], bpm: typing.Optional[float] = None) -> bytes:

	"""
	Single-track file of a note list (e.g. a generated pattern) on channel 0.
	"""

	return encode_file([track_chunk(note_events(notes), tempo_bpm=bpm)])


def export_progression (progression: patternlab.chords.ChordProgression, bpm: typing.Optional[float] = None) -> bytes:

	"""
	Single-track file of a chord progression on channel 0, one chord per bar.
	"""

	return encode_file([track_chunk(progression_events(progression), tempo_bpm=bpm)])


def export_composition (
	bpm: float,
	grid: patternlab.drums.DrumGrid,
	melodic: typing.Union[patternlab.chords.ChordProgression, typing.Iterable[patternlab.pattern.Note]]
) -> bytes:

	"""Format-1 file with a tempo track, a drum track and a melodic track.

	Parameters:
		bpm: Tempo written to the dedicated tempo track.
		grid: Drum grid for the second track.
		melodic: Either a chord progression or a note list for the third track.
	"""

	if isinstance(melodic, patternlab.chords.ChordProgression):
		melodic_events = progression_events(melodic)
	else:
		melodic_events = note_events(melodic)

	tracks = [
		tempo_track(bpm),
		track_chunk(drum_grid_events(grid)),
		track_chunk(melodic_events),
	]

	data = encode_file(tracks, midi_format=1)

	logger.debug(f"Encoded composition: {len(tracks)} tracks, {len(data)} bytes")

	return data
