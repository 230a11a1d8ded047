"""
Pattern Lab - a procedural music pattern tool.

Pattern Lab holds three kinds of musical material and does two things with
each of them:

- **Drum grid.** Four tracks (kick, snare, closed and open hat) of
  sixteenth-note steps, one to many bars long.
- **Chord progression.** An ordered list of chords, one per bar.
- **Generated pattern.** A bass line, chord stabs or a lead melody generated
  from a style, key and density.

Each can be **played** in real time by the look-ahead scheduler, which stamps
every note with a precise clock time so playback stays tight regardless of
event-loop jitter, or **exported** as a byte-exact Standard MIDI File.

Minimal example:

    ```python
    import patternlab

    session = patternlab.Session()
    for step in (0, 4, 8, 12):
        session.drum_grid.set(0, step, True)

    session.generate(style="jazz", instrument="bass", key="D", density=70)
    session.save("bass.mid", source="pattern")
    session.play("drums")
    ```

Package-level exports: ``Session``, ``Scheduler``, ``DrumGrid``,
``ChordProgression``, ``generate_notes``, ``generate_pattern``.
"""

import patternlab.chords
import patternlab.drums
import patternlab.generator
import patternlab.scheduler
import patternlab.session


Session = patternlab.session.Session
Scheduler = patternlab.scheduler.Scheduler
DrumGrid = patternlab.drums.DrumGrid
ChordProgression = patternlab.chords.ChordProgression
generate_notes = patternlab.generator.generate_notes
generate_pattern = patternlab.generator.generate_pattern
