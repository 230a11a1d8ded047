"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127).
"""

DRUM_VELOCITY = 100
BASS_VELOCITY = 100
LEAD_VELOCITY = 100
CHORD_VELOCITY = 90			# Generated triads
PAD_VELOCITY = 80			# Chords played or exported from a progression

NOTE_OFF_VELOCITY = 0

MIN_VELOCITY = 0
MAX_VELOCITY = 127
