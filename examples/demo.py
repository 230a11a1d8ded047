"""
Patternlab Demo

A four-bar lofi loop: a programmed beat, a generated bass line and the
default minor progression.

How to read this file
─────────────────────
1. Session    - Create a session with a tempo and a fixed seed.
2. Drums      - Switch grid cells on, one track at a time.
3. Generate   - Ask the generator for a bass line in C.
4. Export     - Write each source, and the full composition, as MIDI files.
5. Play       - Loop the pattern through the first MIDI output.  Ctrl+C stops.
"""

import logging

import patternlab
import patternlab.config
import patternlab.display


logging.basicConfig(level=logging.INFO)


# ─── Session ─────────────────────────────────────────────────────────

session = patternlab.Session(patternlab.config.Settings(bpm=84, drum_bars=1, seed=12, export_directory="exports"))


# ─── Drums ───────────────────────────────────────────────────────────

KICK, SNARE, CLOSED_HAT, OPEN_HAT = range(4)

for step in (0, 7, 10):
	session.drum_grid.set(KICK, step, True)

for step in (4, 12):
	session.drum_grid.set(SNARE, step, True)

for step in range(0, 16, 2):
	session.drum_grid.set(CLOSED_HAT, step, True)

session.drum_grid.set(OPEN_HAT, 14, True)

print(patternlab.display.render_grid(session.drum_grid))


# ─── Generate ────────────────────────────────────────────────────────

session.generate(style="lofi", instrument="bass", key="C", bars=4, density=40)


# ─── Export ──────────────────────────────────────────────────────────

for source in ("drums", "pattern", "chords", "composition"):
	session.save(source=source)


# ─── Play ────────────────────────────────────────────────────────────

if __name__ == "__main__":
	session.display()
	session.play("pattern")
