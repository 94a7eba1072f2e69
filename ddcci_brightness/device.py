'''
Selecting a display and keeping track of its brightness
'''
import logging
from typing import List, Optional, Tuple

from .exceptions import (DDCBrightnessError, DeviceNotFoundError,
                         ProtocolWriteError, format_exc)
from .helpers import (VCP_BRIGHTNESS, Display, clamp, percent_from_raw,
                      raw_from_percent)
from .types import DisplayName, IntPercentage, RawValue

_logger = logging.getLogger(__name__)


def _probe(display: Display) -> Optional[Tuple[RawValue, RawValue]]:
    '''Returns the current and max brightness of a display, or None if it can't be used'''
    try:
        current, maximum = display.probe()
    except (OSError, DDCBrightnessError) as e:
        _logger.debug(f'probe failed for {display.model_name!r} ({display.source}) - {format_exc(e)}')
        return None

    if maximum <= 0:
        _logger.debug(f'{display.model_name!r} ({display.source}) reports a max brightness of {maximum}')
        return None
    return clamp(current, 0, maximum), maximum


def select_display(
    device_name: DisplayName, displays: List[Display]
) -> Tuple[Display, RawValue, RawValue]:
    '''
    Pick a display to control from a list of candidates.

    If `device_name` is given, the first display with that exact model name is used.
    A matching display that does not respond to brightness queries is treated the same
    as a missing one; no other display is picked in its place.

    Otherwise, each display is probed in order and the first one that responds is used.

    The chosen display is removed from `displays`.

    Args:
        device_name: the model name of the display to use
        displays: the candidates to choose from

    Returns:
        The selected display and its current and maximum raw brightness

    Raises:
        DeviceNotFoundError: if no usable display was found
    '''
    if device_name is not None:
        for index, display in enumerate(displays):
            if display.model_name == device_name:
                break
        else:
            _logger.debug(f'no display named {device_name!r} among {len(displays)} candidates')
            raise DeviceNotFoundError(device_name)

        probed = _probe(display)
        if probed is None:
            raise DeviceNotFoundError(device_name)
        displays.pop(index)
        return (display, *probed)

    for index, display in enumerate(displays):
        probed = _probe(display)
        if probed is not None:
            displays.pop(index)
            return (display, *probed)

    raise DeviceNotFoundError('N/A')


class DdcDevice():
    '''
    A display that has been confirmed to support brightness control via DDC/CI.

    The maximum brightness is read once, when the display is selected.
    The current brightness is tracked locally and only changes when
    a write succeeds.

    Instances have no internal locking. If one is shared between threads,
    callers are responsible for serialising access.
    '''

    def __init__(self, display: Display, current: RawValue, maximum: RawValue):
        if maximum <= 0:
            raise ValueError(f'maximum brightness must be positive, not {maximum}')
        self.display = display
        self._maximum = maximum
        self._current = clamp(current, 0, maximum)
        self._logger = _logger.getChild(self.__class__.__name__).getChild(
            str(display.model_name or display.source)[:20])

    @classmethod
    def try_new(cls, device_name: DisplayName = None, displays: Optional[List[Display]] = None) -> 'DdcDevice':
        '''
        Find a usable display and create a device for it.

        Args:
            device_name: the model name of the display to use.
                If unspecified, the first display that responds is used
            displays: the candidates to choose from.
                Defaults to all displays detected by the current platform

        Raises:
            DeviceNotFoundError: if no usable display was found

        Example:
            ```python
            from ddcci_brightness.device import DdcDevice

            device = DdcDevice.try_new('BenQ GL2450H')
            print(device.percent)
            ```
        '''
        if displays is None:
            from . import _enumerate_displays
            displays = _enumerate_displays()

        display, current, maximum = select_display(device_name, displays)
        _logger.debug(
            f'selected {display.model_name!r} ({display.source}),'
            f' brightness {current}/{maximum}'
        )
        return cls(display, current, maximum)

    def __repr__(self):
        return f'{self.__class__.__name__}({self.display.model_name!r}, current={self._current}, max={self._maximum})'

    @property
    def current(self) -> RawValue:
        '''The last known raw brightness of the display'''
        return self._current

    @property
    def maximum(self) -> RawValue:
        '''The maximum raw brightness of the display'''
        return self._maximum

    @property
    def percent(self) -> IntPercentage:
        '''The current brightness as a percentage'''
        return percent_from_raw(self._current, self._maximum)

    def write_raw(self, value: RawValue):
        '''
        Set the raw brightness of the display.
        Values outside of the display's range are clamped.

        Raises:
            ProtocolWriteError: if the display could not be written to.
                The current brightness is left as it was
        '''
        value = clamp(value, 0, self._maximum)
        try:
            self.display.handle.set_vcp_feature(VCP_BRIGHTNESS, value)
        except (OSError, DDCBrightnessError) as e:
            self._logger.error(f'failed to set brightness to {value} - {format_exc(e)}')
            raise ProtocolWriteError(
                f'failed to set brightness of {self.display.model_name!r} to {value}', value
            ) from e

        self._logger.debug(f'brightness {self._current} -> {value}')
        self._current = value

    def write_percent(self, value: IntPercentage):
        '''
        Set the brightness of the display as a percentage.
        Values outside of 0-100 are clamped.

        Raises:
            ProtocolWriteError: if the display could not be written to
        '''
        self.write_raw(raw_from_percent(clamp(value, 0, 100), self._maximum))
