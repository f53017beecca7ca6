# =======================================================================================
# fingerprint_bridge/services/sensor_mode.py - Sensor Mode State Machine
# =======================================================================================
import logging
from typing import Callable, List, Union
from ..models.enums import SensorMode
from ..utils.exceptions import InvalidModeError

logger = logging.getLogger(__name__)

ModeListener = Callable[[SensorMode, SensorMode], None]


class SensorModeManager:
    """
    Holds the ATTENDANCE / ENROLLMENT mode of the sensor.

    One instance exists per running bridge and is handed to every component
    that needs it. Listeners are called synchronously with (new_mode, old_mode)
    after every successful set_mode, including when the value does not change.
    """

    def __init__(self, initial: SensorMode = SensorMode.ATTENDANCE):
        self._mode = initial
        self._listeners: List[ModeListener] = []

    @staticmethod
    def coerce(mode: Union[SensorMode, str, None]) -> SensorMode:
        """Return mode as a SensorMode or raise InvalidModeError."""
        if isinstance(mode, SensorMode):
            return mode
        try:
            return SensorMode(mode)
        except ValueError:
            raise InvalidModeError("Invalid mode. Must be ATTENDANCE or ENROLLMENT")

    def get_mode(self) -> SensorMode:
        return self._mode

    def set_mode(self, mode: Union[SensorMode, str]) -> bool:
        """Switch mode and notify listeners; state is untouched on invalid input."""
        new_mode = self.coerce(mode)
        old_mode = self._mode
        self._mode = new_mode

        logger.info("Sensor mode changed: %s -> %s", old_mode.value, new_mode.value)
        self._notify_listeners(new_mode, old_mode)
        return True

    def enable_enrollment_mode(self) -> bool:
        return self.set_mode(SensorMode.ENROLLMENT)

    def enable_attendance_mode(self) -> bool:
        return self.set_mode(SensorMode.ATTENDANCE)

    def is_enrollment_mode(self) -> bool:
        return self._mode is SensorMode.ENROLLMENT

    def is_attendance_mode(self) -> bool:
        return self._mode is SensorMode.ATTENDANCE

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, callback: ModeListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: ModeListener) -> None:
        self._listeners = [l for l in self._listeners if l is not callback]

    def _notify_listeners(self, new_mode: SensorMode, old_mode: SensorMode) -> None:
        for listener in list(self._listeners):
            try:
                listener(new_mode, old_mode)
            except Exception:
                logger.exception("Error in mode change listener %r", listener)
