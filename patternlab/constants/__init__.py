"""Timing and channel constants for Pattern Lab.

The sequencer works on a grid of sixteenth-note **steps**.  MIDI export
scales steps to ticks at a fixed resolution of 480 ticks per quarter note.

- ``patternlab.constants.velocity`` - default velocities per instrument
- ``patternlab.constants.gm_drums`` - General MIDI note numbers for the drum catalog
"""

STEPS_PER_BEAT = 4
BEATS_PER_BAR = 4
STEPS_PER_BAR = STEPS_PER_BEAT * BEATS_PER_BAR

TICKS_PER_QUARTER = 480
TICKS_PER_STEP = TICKS_PER_QUARTER // STEPS_PER_BEAT

# Length of an exported drum hit (half a step).
DRUM_HIT_TICKS = 60

DRUM_CHANNEL = 9
MELODIC_CHANNEL = 0

# Chords played from a progression sit in octave 4 (C4 = 60).
CHORD_BASE_PITCH = 60
