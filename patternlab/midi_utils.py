import logging
import typing

import mido

logger = logging.getLogger(__name__)


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Select and open a MIDI output port for live playback.

	If `device_name` is provided, opens that port.  Otherwise the first
	available port is used, so playback works unattended with a single synth
	or a virtual port.

	Returns:
		A tuple of (device_name, port) or (None, None) when no port could be opened.
	"""

	try:
		outputs = mido.get_output_names()
		logger.info(f"Available MIDI outputs: {outputs}")

		if not outputs:
			logger.error("No MIDI output devices found.")
			return None, None

		if device_name is None:
			device_name = outputs[0]
			logger.info(f"No MIDI output configured - using '{device_name}'")

		elif device_name not in outputs:
			logger.error(
				f"MIDI output device '{device_name}' not found. "
				f"Available devices: {outputs}"
			)
			return None, None

		port = mido.open_output(device_name)
		logger.info(f"Opened MIDI output: {device_name}")
		return device_name, port

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None
