import argparse
import logging
import typing

import patternlab.display
import patternlab.intervals
import patternlab.pattern
import patternlab.playback
import patternlab.scheduler
import patternlab.session


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="patternlab", description="Procedural drum, chord and pattern sequencer")
	parser.add_argument("--config", default="config.yaml", help="YAML settings file (default: config.yaml)")

	# Generator overrides, applied on top of the config file.
	parser.add_argument("--style", choices=patternlab.intervals.STYLES, default=None)
	parser.add_argument("--instrument", choices=patternlab.pattern.INSTRUMENTS, default=None)
	parser.add_argument("--key", default=None, help="Root key, e.g. C, F#, Bb")
	parser.add_argument("--density", type=int, default=None, help="0-100")

	commands = parser.add_subparsers(dest="command", required=True)

	export = commands.add_parser("export", help="Write a Standard MIDI File")
	export.add_argument("--source", choices=patternlab.session.EXPORT_SOURCES, default="pattern")
	export.add_argument("--output", default=None, help="Output path (default: export directory + standard name)")
	export.add_argument("--melodic", choices=patternlab.session.MELODIC_SOURCES, default="chords", help="Melodic track of a composition export")

	play = commands.add_parser("play", help="Play through a MIDI output device")
	play.add_argument("--mode", choices=patternlab.scheduler.MODES, default="pattern")

	return parser


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the patternlab command.
	"""

	args = build_parser().parse_args(argv)
	session = patternlab.session.Session.from_config(args.config)

	if any(value is not None for value in (args.style, args.instrument, args.key, args.density)):
		session.generate(style=args.style, instrument=args.instrument, key=args.key, density=args.density)

	if args.command == "export":
		session.save(args.output, source=args.source, melodic=args.melodic)
		return 0

	logger.info("\n" + patternlab.display.render_grid(session.drum_grid))
	logger.info(patternlab.display.render_progression(session.progression))
	session.display()

	try:
		session.play(args.mode)
	except patternlab.playback.AudioDeviceError as exc:
		logger.error(f"Cannot play: {exc}")
		return 1

	return 0


if __name__ == "__main__":
	raise SystemExit(main())
