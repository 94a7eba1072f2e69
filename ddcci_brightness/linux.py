import fcntl
import functools
import glob
import logging
import operator
import os
import re
import time
from typing import List, Tuple

from .exceptions import EDIDParseError, I2CValidationError, format_exc
from .helpers import EDID, DDCHandle, Display

_logger = logging.getLogger(__name__)


class I2C(DDCHandle):
    '''
    Talks DDC/CI to a display over its I2C bus, without relying on any
    3rd party software.

    Usage of this class requires read and write permission for `/dev/i2c-*`.
    On most distros this means being in the `i2c` group and having the
    `i2c-dev` kernel module loaded.

    References:
        * [ddcci.py](https://github.com/siemer/ddcci)
        * [DDCCI Spec](https://milek7.pl/ddcbacklight/ddcci.pdf)
    '''
    _logger = _logger.getChild('I2C')

    # vcp commands
    GET_VCP_CMD = 0x01
    '''VCP command to get the value of a feature (eg: brightness)'''
    GET_VCP_REPLY = 0x02
    '''VCP feature reply op code'''
    SET_VCP_CMD = 0x03
    '''VCP command to set the value of a feature (eg: brightness)'''

    # addresses
    DDCCI_ADDR = 0x37
    '''DDC packets are transmittred using this I2C address'''
    HOST_ADDR_R = 0x50
    '''Packet source address (the computer) when reading data. Also the address the EDID is read from'''
    HOST_ADDR_W = 0x51
    '''Packet source address (the computer) when writing data'''
    DESTINATION_ADDR_W = 0x6e
    '''Packet destination address (the monitor) when writing data'''
    I2C_SLAVE = 0x0703
    '''The `ioctl` request used to set the slave address of the bus'''

    # timings
    WAIT_TIME = 0.05
    '''How long to wait between I2C commands'''

    class I2CDevice():
        '''
        Reads and writes raw bytes on an I2C bus, based on the `I2CDev` class
        from [ddcci.py](https://github.com/siemer/ddcci).

        Can be used as a context manager, which closes the bus afterwards.
        '''

        def __init__(self, fname: str, slave_addr: int):
            '''
            Args:
                fname: the I2C path, eg: `/dev/i2c-2`
                slave_addr: the address of the device on the bus to talk to
            '''
            self.device = os.open(fname, os.O_RDWR)
            try:
                fcntl.ioctl(self.device, I2C.I2C_SLAVE, slave_addr)
            except OSError:
                os.close(self.device)
                raise

        def __enter__(self):
            return self

        def __exit__(self, *_):
            self.close()

        def close(self):
            os.close(self.device)

        def read(self, length: int) -> bytes:
            '''
            Read a certain number of bytes from the I2C bus

            Args:
                length: the number of bytes to read
            '''
            return os.read(self.device, length)

        def write(self, data: bytes) -> int:
            '''
            Writes data to the I2C bus

            Args:
                data: the data to write

            Returns:
                The number of bytes written
            '''
            return os.write(self.device, data)

    class DDCInterface(I2CDevice):
        '''
        Sends DDC (Display Data Channel) commands to an I2C device,
        based on the `Ddcci` and `Mccs` classes from [ddcci.py](https://github.com/siemer/ddcci)
        '''

        PROTOCOL_FLAG = 0x80

        def __init__(self, i2c_path: str):
            '''
            Args:
                i2c_path: the path to the I2C device, eg: `/dev/i2c-2`
            '''
            self.logger = _logger.getChild(
                self.__class__.__name__).getChild(i2c_path)
            super().__init__(i2c_path, I2C.DDCCI_ADDR)

        def write(self, *args) -> int:
            '''
            Wrap the arguments in a DDC/CI packet (source address, length and checksum)
            and write it to the bus.

            It is recommended to use `setvcp` or `getvcp` instead of calling this directly.

            Returns:
                The number of bytes that were written
            '''
            time.sleep(I2C.WAIT_TIME)

            ba = bytearray(args)
            ba.insert(0, len(ba) | self.PROTOCOL_FLAG)
            ba.insert(0, I2C.HOST_ADDR_W)
            ba.append(functools.reduce(operator.xor, ba, I2C.DESTINATION_ADDR_W))

            return super().write(ba)

        def setvcp(self, vcp_code: int, value: int) -> int:
            '''
            Set a VCP value on the device

            Args:
                vcp_code: the VCP feature to set, eg: `0x10` is brightness
                value: what to set the value to

            Returns:
                The number of bytes written to the device
            '''
            return self.write(I2C.SET_VCP_CMD, vcp_code, *value.to_bytes(2, 'big'))

        def read(self, amount: int) -> bytes:
            '''
            Reads a DDC/CI packet and returns its payload.

            Args:
                amount: the expected length of the payload

            Raises:
                I2CValidationError: if the packet is invalid
            '''
            time.sleep(I2C.WAIT_TIME)

            ba = super().read(amount + 3)

            checks = {
                'source address': len(ba) > 1 and ba[0] == I2C.DESTINATION_ADDR_W,
                'checksum': functools.reduce(operator.xor, ba, 0) == I2C.HOST_ADDR_R,
                'length': len(ba) > 1 and len(ba) >= (ba[1] & ~self.PROTOCOL_FLAG) + 3
            }
            if False in checks.values():
                self.logger.error('i2c read check failed: ' + repr(checks))
                raise I2CValidationError('i2c read check failed: ' + repr(checks))

            return ba[2:-1]

        def getvcp(self, vcp_code: int) -> Tuple[int, int]:
            '''
            Retrieves a VCP value from the DDC device.

            Args:
                vcp_code: the VCP feature to read, eg: `0x10` is brightness

            Returns:
                The current and maximum value respectively

            Raises:
                I2CValidationError: if the reply is invalid or the feature is unsupported
            '''
            self.write(I2C.GET_VCP_CMD, vcp_code)
            ba = self.read(8)

            checks = {
                'is feature reply': len(ba) == 8 and ba[0] == I2C.GET_VCP_REPLY,
                'supported VCP opcode': len(ba) == 8 and ba[1] == 0,
                'answer matches request': len(ba) == 8 and ba[2] == vcp_code
            }
            if False in checks.values():
                self.logger.error('i2c read check failed: ' + repr(checks))
                raise I2CValidationError('i2c read check failed: ' + repr(checks))

            return int.from_bytes(ba[6:8], 'big'), int.from_bytes(ba[4:6], 'big')

    def __init__(self, i2c_path: str):
        '''
        Args:
            i2c_path: the path to the I2C bus the display is on, eg: `/dev/i2c-4`
        '''
        self.i2c_path = i2c_path

    def __repr__(self):
        return f'{self.__class__.__name__}({self.i2c_path!r})'

    def get_vcp_feature(self, code: int) -> Tuple[int, int]:
        with self.DDCInterface(self.i2c_path) as interface:
            return interface.getvcp(code)

    def set_vcp_feature(self, code: int, value: int):
        with self.DDCInterface(self.i2c_path) as interface:
            interface.setvcp(code, value)


def _bus_number(i2c_path: str) -> int:
    match = re.search(r'(\d+)$', i2c_path)
    return int(match.group(1)) if match else -1


def enumerate_displays() -> List[Display]:
    '''
    Scans every I2C bus for a display EDID and returns a `Display` for each one found.
    Buses are scanned in numerical order.

    No DDC/CI commands are sent, so the returned displays are not guaranteed
    to support brightness control.
    '''
    displays = []
    for i2c_path in sorted(glob.glob('/dev/i2c-*'), key=_bus_number):
        if not os.path.exists(i2c_path):
            continue

        try:
            with I2C.I2CDevice(i2c_path, I2C.HOST_ADDR_R) as device:
                data = device.read(512)
        except OSError as e:
            _logger.debug(f'error reading from device {i2c_path} - {format_exc(e)}')
            continue

        edid = EDID.find(data)
        if edid is None:
            continue

        try:
            manufacturer_id, name, serial = EDID.parse(edid)
        except EDIDParseError as e:
            _logger.warning(f'failed to parse edid from {i2c_path} - {format_exc(e)}')
            continue

        displays.append(Display(
            handle=I2C(i2c_path),
            model_name=name,
            serial=serial,
            manufacturer_id=manufacturer_id,
            edid=edid.hex(),
            source=i2c_path
        ))

    _logger.debug(f'found {len(displays)} displays on the I2C bus')
    return displays
