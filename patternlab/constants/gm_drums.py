"""General MIDI percussion notes used by the drum catalog.

GM reserves channel 10 (0-indexed channel 9) for percussion.  Only the four
sounds the drum grid exposes are listed here.
"""

import typing


KICK_1 = 36
SNARE_1 = 38
HI_HAT_CLOSED = 42
HI_HAT_OPEN = 46


GM_DRUM_MAP: typing.Dict[str, int] = {
	"kick": KICK_1,
	"snare": SNARE_1,
	"hi_hat_closed": HI_HAT_CLOSED,
	"hi_hat_open": HI_HAT_OPEN,
}
