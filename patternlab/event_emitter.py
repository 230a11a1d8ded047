import asyncio
import logging
import typing


logger = logging.getLogger(__name__)


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Named-event fan-out used by the scheduler (``start``, ``stop``, ``step``).

	Listeners are plain callables run synchronously, in registration order.
	A listener that raises is logged and does not stop the others, so a
	broken display can never stall playback.
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		if asyncio.iscoroutinefunction(callback):
			raise ValueError(f"Listener for {event_name!r} must be synchronous")

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def emit (self, event_name: str, *args: typing.Any) -> None:

		"""
		Call every listener of *event_name* with *args*.
		"""

		for callback in list(self._listeners.get(event_name, [])):

			try:
				callback(*args)
			except Exception:
				logger.exception(f"Listener for {event_name!r} failed")
