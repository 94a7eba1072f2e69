'''
Helper functions for the library
'''
from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .exceptions import EDIDParseError
from .types import DisplayName, IntPercentage, RawValue

VCP_BRIGHTNESS = 0x10
'''VCP feature code to get and set the brightness of a display via DDC/CI'''


def div_round(numerator: int, denominator: int) -> int:
    '''
    Integer division that rounds to the nearest integer instead of truncating.
    Halves are rounded away from zero, so `div_round(5, 2) == 3`.

    Raises:
        ZeroDivisionError: if `denominator` is 0
    '''
    if denominator == 0:
        raise ZeroDivisionError('div_round denominator cannot be 0')
    quotient, remainder = divmod(abs(numerator), abs(denominator))
    if remainder * 2 >= abs(denominator):
        quotient += 1
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def clamp(value: int, lower: int, upper: int) -> int:
    '''Bound `value` to the range `[lower, upper]`'''
    return max(lower, min(upper, value))


def raw_from_percent(percent: IntPercentage, maximum: RawValue) -> RawValue:
    '''
    Scale a percentage to the raw range of a display

    Args:
        percent: the percentage to convert
        maximum: the maximum raw value of the display

    Example:
        ```python
        raw_from_percent(50, 80)  # 40
        ```
    '''
    return div_round(percent * maximum, 100)


def percent_from_raw(raw: RawValue, maximum: RawValue) -> IntPercentage:
    '''
    Scale a raw display value to a percentage

    Args:
        raw: the raw value to convert
        maximum: the maximum raw value of the display. Must not be 0
    '''
    return div_round(raw * 100, maximum)


class DDCHandle(ABC):
    '''
    A connection to a single physical display, capable of reading
    and writing VCP features over DDC/CI.

    Implementations signal failure by raising `OSError` or a
    `.exceptions.DDCBrightnessError` subclass.
    '''
    @abstractmethod
    def get_vcp_feature(self, code: int) -> Tuple[int, int]:
        '''
        Args:
            code: the VCP feature to read, eg: `0x10` is brightness

        Returns:
            The current and maximum value of the feature respectively
        '''
        ...

    @abstractmethod
    def set_vcp_feature(self, code: int, value: int):
        '''
        Args:
            code: the VCP feature to write, eg: `0x10` is brightness
            value: what to set the feature to
        '''
        ...


@dataclass
class Display():
    '''
    A display detected by one of the platform transports.
    Nothing has been sent to the display yet, so it may or may not
    actually support DDC/CI brightness control.
    '''
    handle: DDCHandle = field(repr=False)
    '''The connection used to talk to the display'''
    model_name: DisplayName = None
    '''The name of the display from its EDID, eg: `'BenQ GL2450H'`'''
    serial: Optional[str] = None
    '''The serial number of the display'''
    manufacturer_id: Optional[str] = None
    '''3 letter code corresponding to the manufacturer name'''
    edid: Optional[str] = None
    '''A 256 character hex string containing information about a display and its capabilities'''
    source: Optional[str] = None
    '''Where the display was found, eg: `'/dev/i2c-4'`'''

    def probe(self) -> Tuple[RawValue, RawValue]:
        '''
        Query the brightness feature of the display.

        Returns:
            The current and maximum raw brightness values respectively
        '''
        return self.handle.get_vcp_feature(VCP_BRIGHTNESS)


class BrightnessBackend(ABC):
    '''
    Common interface for anything that can adjust the brightness of a single display.
    All percentage arguments are `.types.IntPercentage` values and all return values
    from the getters are raw values in the display's own units.
    '''
    @classmethod
    @abstractmethod
    def try_new(cls, device_name: DisplayName = None) -> 'BrightnessBackend':
        '''
        Args:
            device_name: the model name of the display to control.
                If unspecified, the first usable display is picked

        Raises:
            DeviceNotFoundError: if no usable display could be found
        '''
        ...

    @abstractmethod
    def get_current(self) -> RawValue:
        ...

    @abstractmethod
    def get_max(self) -> RawValue:
        ...

    @abstractmethod
    def raise_brightness(self, by: IntPercentage, floor: IntPercentage):
        '''
        Args:
            by: how much to raise the brightness by
            floor: the brightness will never be set lower than this
        '''
        ...

    @abstractmethod
    def lower_brightness(self, by: IntPercentage, floor: IntPercentage):
        '''
        Args:
            by: how much to lower the brightness by
            floor: the brightness will never be set lower than this
        '''
        ...

    @abstractmethod
    def set_brightness(self, value: IntPercentage, floor: IntPercentage):
        '''
        Args:
            value: the new brightness level
            floor: the brightness will never be set lower than this
        '''
        ...


class EDID:
    '''
    Simple structure and method to extract display serial and name from an EDID string.
    '''
    EDID_FORMAT: str = (
        ">"     # big-endian
        "8s"    # constant header (8 bytes)
        "H"     # manufacturer id (2 bytes)
        "H"     # product id (2 bytes)
        "I"     # serial number (4 bytes)
        "B"     # manufactoring week (1 byte)
        "B"     # manufactoring year (1 byte)
        "B"     # edid version (1 byte)
        "B"     # edid revision (1 byte)
        "B"     # video input type (1 byte)
        "B"     # horizontal size in cm (1 byte)
        "B"     # vertical size in cm (1 byte)
        "B"     # display gamma (1 byte)
        "B"     # supported features (1 byte)
        "10s"   # colour characteristics (10 bytes)
        "H"     # supported timings (2 bytes)
        "B"     # reserved timing (1 byte)
        "16s"   # EDID supported timings (16 bytes)
        "18s"   # timing / display descriptor block 1 (18 bytes)
        "18s"   # timing / display descriptor block 2 (18 bytes)
        "18s"   # timing / display descriptor block 3 (18 bytes)
        "18s"   # timing / display descriptor block 4 (18 bytes)
        "B"     # extension flag (1 byte)
        "B"     # checksum (1 byte)
    )
    '''
    The byte structure for EDID strings, taken from
    [pyedid](https://github.com/jojonas/pyedid/blob/2382910d968b2fa8de1fab495fbbdfebcdb39f19/pyedid/edid.py#L21),
    [Copyright 2019-2020 Jonas Lieb, Davydov Denis](https://github.com/jojonas/pyedid/blob/master/LICENSE).
    '''
    HEADER = bytes.fromhex('00 ff ff ff ff ff ff 00')
    SERIAL_DESCRIPTOR = bytes.fromhex('00 00 00 ff 00')
    NAME_DESCRIPTOR = bytes.fromhex('00 00 00 fc 00')

    @classmethod
    def parse(cls, edid: Union[bytes, str]) -> Tuple[Union[str, None], ...]:
        '''
        Takes an EDID string and parses the manufacturer ID, display name and serial from it,
        following the [EDID 1.4](https://en.wikipedia.org/wiki/Extended_Display_Identification_Data#EDID_1.4_data_format)
        layout.

        Args:
            edid (bytes or str): the EDID, can either be raw bytes or
                a hex formatted string (00 ff ff ff ff...)

        Returns:
            tuple[str | None]: the display's manufacturer ID, name and serial in that order.
                Any value that cannot be determined will be None

        Raises:
            EDIDParseError: if the EDID info cannot be unpacked
            TypeError: if `edid` is not `str` or `bytes`
        '''
        if isinstance(edid, str):
            edid = bytes.fromhex(edid)
        elif not isinstance(edid, bytes):
            raise TypeError(f'edid must be of type bytes or str, not {type(edid)!r}')

        try:
            blocks = struct.unpack(cls.EDID_FORMAT, edid)
        except struct.error as e:
            raise EDIDParseError('cannot unpack edid') from e

        # 3 letters, 5 bits each, after one reserved bit
        mfg_id = ''.join(
            chr(i + 64) for i in (blocks[1] >> 10, (blocks[1] >> 5) & 0b11111, blocks[1] & 0b11111)
        )

        serial = None
        name = None
        for descriptor_block in blocks[17:21]:
            if descriptor_block.startswith(cls.SERIAL_DESCRIPTOR):
                serial = descriptor_block[len(cls.SERIAL_DESCRIPTOR):].rstrip().decode(errors='replace')
            elif descriptor_block.startswith(cls.NAME_DESCRIPTOR):
                name = descriptor_block[len(cls.NAME_DESCRIPTOR):].rstrip().decode(errors='replace')

        return mfg_id, name or None, serial or None

    @classmethod
    def find(cls, data: bytes) -> Optional[bytes]:
        '''
        Search a block of bytes for an EDID and return the first 128 bytes of it

        Returns:
            The EDID, or None if no EDID header is present
        '''
        start = data.find(cls.HEADER)
        if start < 0 or len(data) - start < 128:
            return None
        return data[start: start + 128]
