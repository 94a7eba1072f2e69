import pytest

import ddcci_brightness as ddc
from ddcci_brightness import _debug


def test_info():
    info = _debug.info()
    assert info['version'] == ddc.__version__
    assert [i['name'] for i in info['displays']] == ['Acer XYZ789', 'BenQ DEF456', 'Dell ABC123']
    assert info['displays'][1]['brightness'] == (40, 80)
    # unsupported displays get a traceback instead
    assert 'I2CValidationError' in info['displays'][0]['brightness']


def test_info_does_not_write(displays):
    _debug.info()
    assert all(i.handle.writes == [] for i in displays)


def test_info_enumeration_failure(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(ddc, '_OS_MODULE', None)
    info = _debug.info()
    assert 'DDCBrightnessError' in info['displays']
