"""YAML configuration.

Every key is optional; anything missing takes the default below.

```yaml
sequencer:
  bpm: 96
  lead_in: 0.05
  schedule_ahead: 0.1
  interval: 0.025
drums:
  bars: 2
generator:
  style: jazz
  instrument: bass
  key: D
  bars: 4
  density: 60
  seed: 7
chords:
  progression: ["D minor_7th", "G dominant_7th", "C major_7th"]
midi:
  device_name: "IAC Driver Bus 1"
export:
  directory: exports
```
"""

import dataclasses
import logging
import os
import typing

import yaml

import patternlab.chords


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Settings:

	"""
	Flattened configuration for a session.
	"""

	bpm: float = 120
	lead_in: float = 0.05
	schedule_ahead: float = 0.1
	interval: float = 0.025

	drum_bars: int = 1

	style: str = "lofi"
	instrument: str = "bass"
	key: str = "C"
	pattern_bars: int = 4
	density: int = 50
	seed: typing.Optional[int] = None

	progression: typing.List[typing.Tuple[str, str]] = dataclasses.field(
		default_factory=lambda: list(patternlab.chords.DEFAULT_PROGRESSION)
	)

	device_name: typing.Optional[str] = None
	export_directory: str = "."


# (section, key) -> Settings field
_FIELD_MAP: typing.Dict[typing.Tuple[str, str], str] = {
	("sequencer", "bpm"): "bpm",
	("sequencer", "lead_in"): "lead_in",
	("sequencer", "schedule_ahead"): "schedule_ahead",
	("sequencer", "interval"): "interval",
	("drums", "bars"): "drum_bars",
	("generator", "style"): "style",
	("generator", "instrument"): "instrument",
	("generator", "key"): "key",
	("generator", "bars"): "pattern_bars",
	("generator", "density"): "density",
	("generator", "seed"): "seed",
	("midi", "device_name"): "device_name",
	("export", "directory"): "export_directory",
}


def load_config (config_path: str = 'config.yaml') -> Settings:

	"""
	Load settings from a YAML file.  A missing or empty file gives the defaults.
	"""

	settings = Settings()

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return settings

	with open(config_path, 'r') as f:
		raw = yaml.safe_load(f) or {}

	if not isinstance(raw, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return apply_config(settings, raw)


def apply_config (settings: Settings, raw: typing.Dict[str, typing.Any]) -> Settings:

	"""
	Overlay a parsed config mapping onto *settings*.  Unknown keys are logged and skipped.
	"""

	for section, values in raw.items():

		if not isinstance(values, dict):
			logger.warning(f"Ignoring config section {section!r}: expected a mapping")
			continue

		for key, value in values.items():

			if section == "chords" and key == "progression":
				settings.progression = [patternlab.chords.parse_chord_symbol(symbol) for symbol in value or []]
				continue

			field_name = _FIELD_MAP.get((section, key))

			if field_name is None:
				logger.warning(f"Ignoring unknown config key {section}.{key}")
				continue

			setattr(settings, field_name, value)

	return settings
