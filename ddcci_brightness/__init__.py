import logging
import platform
from types import ModuleType
from typing import List, Optional

from ._version import __author__, __version__  # noqa: F401
from .device import DdcDevice
from .exceptions import (DDCBrightnessError, DeviceNotFoundError,  # noqa: F401
                         ProtocolWriteError)
from .helpers import BrightnessBackend, Display, raw_from_percent
from .types import DisplayName, IntPercentage, RawValue
from . import config


_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())


def _check_percentage(name: str, value: IntPercentage):
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f'{name} must be of type int, not {type(value).__name__!r}')
    if value < 0:
        raise ValueError(f'{name} cannot be negative, got {value}')


class Ddcci(BrightnessBackend):
    '''
    Controls the brightness of a single display over DDC/CI.

    Every adjustment is given a `floor`: a percentage that the brightness will
    never settle below, no matter which direction it is being moved in.

    Example:
        ```python
        from ddcci_brightness import Ddcci

        backend = Ddcci.try_new()
        # raise the brightness by 10%, keeping it at 5% or more
        backend.raise_brightness(10, 5)
        print(backend.get_current(), '/', backend.get_max())
        ```
    '''

    def __init__(self, device: DdcDevice):
        self.device = device

    @classmethod
    def try_new(cls, device_name: DisplayName = None) -> 'Ddcci':
        return cls(DdcDevice.try_new(device_name))

    def __repr__(self):
        return f'{self.__class__.__name__}({self.device!r})'

    def get_current(self) -> RawValue:
        return self.device.current

    def get_max(self) -> RawValue:
        return self.device.maximum

    def get_percent(self) -> IntPercentage:
        '''Returns the current brightness as a percentage'''
        return self.device.percent

    def raise_brightness(self, by: IntPercentage, floor: IntPercentage):
        _check_percentage('by', by)
        _check_percentage('floor', floor)
        maximum = self.device.maximum
        step = raw_from_percent(by, maximum)
        new_value = min(self.device.current + step, maximum)
        # lifts displays that started out below the floor
        floor_raw = raw_from_percent(floor, maximum)
        self.device.write_raw(max(new_value, floor_raw))

    def lower_brightness(self, by: IntPercentage, floor: IntPercentage):
        _check_percentage('by', by)
        _check_percentage('floor', floor)
        maximum = self.device.maximum
        step = raw_from_percent(by, maximum)
        new_value = max(self.device.current - step, 0)
        floor_raw = raw_from_percent(floor, maximum)
        self.device.write_raw(max(new_value, floor_raw))

    def set_brightness(self, value: IntPercentage, floor: IntPercentage):
        _check_percentage('value', value)
        _check_percentage('floor', floor)
        self.device.write_raw(raw_from_percent(max(value, floor), self.device.maximum))


def _enumerate_displays() -> List[Display]:
    if _OS_MODULE is None:
        raise DDCBrightnessError(f'DDC/CI is not supported on this platform ({platform.system()})')
    return _OS_MODULE.enumerate_displays()


def list_monitors_info() -> List[Display]:
    '''
    List every display detected on this computer. Displays are not queried,
    so some of them may not support brightness control.

    Example:
        ```python
        import ddcci_brightness as ddc

        for display in ddc.list_monitors_info():
            print('=======================')
            print('Name:', display.model_name)
            print('Serial:', display.serial)
            print('Manufacturer ID:', display.manufacturer_id)
            print('Found at:', display.source)
        ```
    '''
    return _enumerate_displays()


def list_monitors() -> List[str]:
    '''
    List the names of all detected displays. Displays without a name are skipped.

    Example:
        ```python
        import ddcci_brightness as ddc
        display_names = ddc.list_monitors()
        # eg: ['BenQ GL2450H', 'DELL U2415']
        ```
    '''
    return [i.model_name for i in list_monitors_info() if i.model_name is not None]


@config.default_params
def get_brightness(display: DisplayName = None) -> IntPercentage:
    '''
    Returns the current brightness of a display as a percentage

    Args:
        display: the model name of the display to query.
            If unspecified, the first usable display is queried

    Raises:
        DeviceNotFoundError: if the display cannot be found

    Example:
        ```python
        import ddcci_brightness as ddc

        current_brightness = ddc.get_brightness()
        benq_brightness = ddc.get_brightness(display='BenQ GL2450H')
        ```
    '''
    return Ddcci.try_new(display).get_percent()


@config.default_params
def set_brightness(
    value: IntPercentage,
    display: DisplayName = None,
    floor: Optional[IntPercentage] = None
) -> IntPercentage:
    '''
    Sets the brightness of a display

    Args:
        value: the new brightness percentage
        display: the model name of the display to adjust.
            If unspecified, the first usable display is adjusted
        floor: the brightness will never be set lower than this percentage.
            Defaults to `.config.MIN_BRIGHTNESS`

    Returns:
        The new brightness percentage

    Raises:
        DeviceNotFoundError: if the display cannot be found
        ProtocolWriteError: if the new brightness could not be written to the display

    Example:
        ```python
        import ddcci_brightness as ddc

        # set brightness to 50%
        ddc.set_brightness(50)

        # set brightness to 5%, but no lower than 10%
        ddc.set_brightness(5, floor=10)
        ```
    '''
    backend = Ddcci.try_new(display)
    backend.set_brightness(value, floor or 0)
    return backend.get_percent()


@config.default_params
def raise_brightness(
    by: IntPercentage,
    display: DisplayName = None,
    floor: Optional[IntPercentage] = None
) -> IntPercentage:
    '''
    Raises the brightness of a display by a percentage of its maximum brightness.
    See `set_brightness` for details on the other arguments

    Returns:
        The new brightness percentage

    Example:
        ```python
        import ddcci_brightness as ddc

        # increase brightness by 25%
        ddc.raise_brightness(25)
        ```
    '''
    backend = Ddcci.try_new(display)
    backend.raise_brightness(by, floor or 0)
    return backend.get_percent()


@config.default_params
def lower_brightness(
    by: IntPercentage,
    display: DisplayName = None,
    floor: Optional[IntPercentage] = None
) -> IntPercentage:
    '''
    Lowers the brightness of a display by a percentage of its maximum brightness.
    See `set_brightness` for details on the other arguments

    Returns:
        The new brightness percentage

    Example:
        ```python
        import ddcci_brightness as ddc

        # decrease brightness by 30%, but never go below 10%
        ddc.lower_brightness(30, floor=10)
        ```
    '''
    backend = Ddcci.try_new(display)
    backend.lower_brightness(by, floor or 0)
    return backend.get_percent()


_OS_MODULE: Optional[ModuleType] = None
if platform.system() == 'Windows':
    from . import windows
    _OS_MODULE = windows
elif platform.system() == 'Linux':
    from . import linux
    _OS_MODULE = linux
else:
    _logger.warning(
        f'package imported on unsupported platform ({platform.system()})')
