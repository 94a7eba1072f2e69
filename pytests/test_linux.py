from typing import Dict
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

pytest.importorskip('fcntl')

from ddcci_brightness import linux  # noqa: E402
from ddcci_brightness.device import DdcDevice  # noqa: E402
from ddcci_brightness.exceptions import (I2CValidationError,  # noqa: E402
                                         ProtocolWriteError)
from ddcci_brightness.linux import I2C  # noqa: E402

from .helpers import ddc_reply, fake_edid  # noqa: E402


@pytest.fixture
def mock_os(mocker: MockerFixture) -> MagicMock:
    '''Replaces the `os` and `fcntl` modules used by the I2C transport'''
    mock = mocker.patch.object(linux, 'os')
    mock.open.return_value = 3
    mock.write.side_effect = lambda fd, data: len(data)
    mocker.patch.object(linux, 'fcntl')
    mocker.patch.object(linux, 'time')
    return mock


def brightness_reply(current: int, maximum: int, result: int = 0, code: int = 0x10) -> bytes:
    return ddc_reply(0x02, result, code, 0x00, *maximum.to_bytes(2, 'big'), *current.to_bytes(2, 'big'))


class TestDDCInterface:
    def test_setvcp_packet(self, mock_os: MagicMock):
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            interface.setvcp(0x10, 50)
        mock_os.write.assert_called_once_with(3, bytearray.fromhex('51 84 03 10 00 32 9a'))

    def test_getvcp(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(40, 80)
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            assert interface.getvcp(0x10) == (40, 80)
        mock_os.write.assert_called_once_with(3, bytearray.fromhex('51 82 01 10 ac'))
        mock_os.read.assert_called_once_with(3, 11)

    def test_getvcp_large_values(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(300, 1000)
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            assert interface.getvcp(0x10) == (300, 1000)

    def test_unsupported_feature(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(0, 0, result=1)
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            with pytest.raises(I2CValidationError):
                interface.getvcp(0x10)

    def test_mismatched_feature(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(40, 80, code=0x12)
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            with pytest.raises(I2CValidationError):
                interface.getvcp(0x10)

    def test_bad_checksum(self, mock_os: MagicMock):
        reply = bytearray(brightness_reply(40, 80))
        reply[-1] ^= 0xff
        mock_os.read.return_value = bytes(reply)
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            with pytest.raises(I2CValidationError):
                interface.getvcp(0x10)

    def test_empty_read(self, mock_os: MagicMock):
        mock_os.read.return_value = b''
        with I2C.DDCInterface('/dev/i2c-4') as interface:
            with pytest.raises(I2CValidationError):
                interface.getvcp(0x10)

    def test_slave_address(self, mock_os: MagicMock):
        I2C.DDCInterface('/dev/i2c-4')
        linux.fcntl.ioctl.assert_called_once_with(3, I2C.I2C_SLAVE, I2C.DDCCI_ADDR)

    def test_closed_if_ioctl_fails(self, mock_os: MagicMock):
        linux.fcntl.ioctl.side_effect = OSError(16, 'Device or resource busy')
        with pytest.raises(OSError):
            I2C.DDCInterface('/dev/i2c-4')
        mock_os.close.assert_called_once_with(3)


class TestI2CHandle:
    def test_get_vcp_feature(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(40, 80)
        assert I2C('/dev/i2c-4').get_vcp_feature(0x10) == (40, 80)
        mock_os.open.assert_called_once_with('/dev/i2c-4', mock_os.O_RDWR)
        mock_os.close.assert_called_once_with(3)

    def test_bus_closed_on_error(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(0, 0, result=1)
        with pytest.raises(I2CValidationError):
            I2C('/dev/i2c-4').get_vcp_feature(0x10)
        mock_os.close.assert_called_once_with(3)

    def test_set_vcp_feature(self, mock_os: MagicMock):
        I2C('/dev/i2c-4').set_vcp_feature(0x10, 50)
        mock_os.write.assert_called_once_with(3, bytearray.fromhex('51 84 03 10 00 32 9a'))
        mock_os.close.assert_called_once_with(3)

    def test_write_error_reaches_device(self, mock_os: MagicMock):
        mock_os.read.return_value = brightness_reply(40, 80)
        device = DdcDevice.try_new(displays=[linux.Display(handle=I2C('/dev/i2c-4'), model_name='X')])

        mock_os.write.side_effect = OSError(121, 'Remote I/O error')
        with pytest.raises(ProtocolWriteError):
            device.write_raw(10)
        assert device.current == 40


class TestEnumerateDisplays:
    @pytest.fixture
    def buses(self) -> Dict[str, bytes]:
        '''What reading from each I2C bus returns'''
        return {
            '/dev/i2c-10': bytes(128) + bytes.fromhex(fake_edid('BNQ', 'BenQ DEF456', 'serial456')) + bytes(256),
            '/dev/i2c-2': bytes.fromhex(fake_edid('DEL', 'Dell ABC123', 'serial123')) + bytes(384),
            '/dev/i2c-3': bytes(512),
        }

    @pytest.fixture(autouse=True)
    def patch_buses(self, mocker: MockerFixture, mock_os: MagicMock, buses: Dict[str, bytes]):
        paths = list(buses)

        def open_bus(path, flags):
            if path not in buses:
                raise FileNotFoundError(path)
            return paths.index(path)

        mocker.patch.object(linux, 'glob').glob.return_value = paths
        mock_os.path.exists.return_value = True
        mock_os.open.side_effect = open_bus
        mock_os.read.side_effect = lambda fd, length: buses[paths[fd]][:length]

    def test_displays_found(self):
        displays = linux.enumerate_displays()
        assert [d.model_name for d in displays] == ['Dell ABC123', 'BenQ DEF456']
        assert [d.serial for d in displays] == ['serial123', 'serial456']
        assert [d.manufacturer_id for d in displays] == ['DEL', 'BNQ']

    def test_sources_and_handles(self):
        displays = linux.enumerate_displays()
        assert [d.source for d in displays] == ['/dev/i2c-2', '/dev/i2c-10']
        assert all(isinstance(d.handle, I2C) for d in displays)
        assert [d.handle.i2c_path for d in displays] == ['/dev/i2c-2', '/dev/i2c-10']

    def test_edid_stored(self):
        display = linux.enumerate_displays()[0]
        assert display.edid == fake_edid('DEL', 'Dell ABC123', 'serial123')

    def test_edid_read_from_host_address(self):
        linux.enumerate_displays()
        for call in linux.fcntl.ioctl.call_args_list:
            assert call.args[1:] == (I2C.I2C_SLAVE, I2C.HOST_ADDR_R)

    def test_unreadable_bus_skipped(self, mock_os: MagicMock):
        mock_os.open.side_effect = PermissionError(13, 'Permission denied')
        assert linux.enumerate_displays() == []

    def test_buses_are_closed(self, mock_os: MagicMock):
        linux.enumerate_displays()
        assert mock_os.close.call_count == 3
