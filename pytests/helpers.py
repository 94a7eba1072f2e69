from typing import List

from ddcci_brightness.exceptions import I2CValidationError
from ddcci_brightness.helpers import VCP_BRIGHTNESS, DDCHandle, Display


def fake_edid(mfg_id: str, name: str, serial: str) -> str:
    def descriptor(string: str) -> str:
        return string.encode('utf-8').hex() + ('20' * (13 - len(string)))

    mfg_ords = [ord(i) - 64 for i in mfg_id]
    mfg = mfg_ords[0] << 10 | mfg_ords[1] << 5 | mfg_ords[2]

    return ''.join((
        '00ffffffffffff00',  # header
        f'{mfg:04x}',  # mfg id
        '00' * 44,  # product id -> edid timings
        '00' * 18,  # empty descriptor block
        f'000000fc00{descriptor(name)}',  # name descriptor
        f'000000ff00{descriptor(serial)}',  # serial descriptor
        '00' * 18,  # empty descriptor
        '00'  # extension flag
        '00'  # checksum
    ))


def ddc_reply(*payload: int) -> bytes:
    '''Wraps a payload up the way a display would when replying over DDC/CI'''
    ba = bytearray([0x6e, 0x80 | len(payload), *payload])
    checksum = 0x50
    for byte in ba:
        checksum ^= byte
    ba.append(checksum)
    return bytes(ba)


class FakeHandle(DDCHandle):
    '''In-memory display that records every brightness write'''

    def __init__(self, current: int = 50, maximum: int = 100, supported: bool = True, fail_writes: bool = False):
        self.current = current
        self.maximum = maximum
        self.supported = supported
        self.fail_writes = fail_writes
        self.writes: List[int] = []

    def get_vcp_feature(self, code: int):
        assert code == VCP_BRIGHTNESS, 'should only be getting the brightness'
        if not self.supported:
            raise I2CValidationError('i2c read check failed: unsupported VCP opcode')
        return self.current, self.maximum

    def set_vcp_feature(self, code: int, value: int):
        assert code == VCP_BRIGHTNESS, 'should only be setting the brightness'
        if self.fail_writes:
            raise OSError(121, 'Remote I/O error')
        self.writes.append(value)
        self.current = value


def fake_display(name, **kwargs) -> Display:
    return Display(handle=FakeHandle(**kwargs), model_name=name, source=f'fake:{name}')
