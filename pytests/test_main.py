from typing import List

import pytest

from ddcci_brightness.__main__ import main
from ddcci_brightness.helpers import Display


class TestMain:
    def test_get(self, capsys: pytest.CaptureFixture):
        assert main(['--get']) == 0
        assert capsys.readouterr().out.strip() == 'Display: 50%'

    def test_get_display(self, capsys: pytest.CaptureFixture):
        assert main(['-g', '-d', 'Dell ABC123']) == 0
        assert capsys.readouterr().out.strip() == 'Dell ABC123: 50%'

    def test_set(self, capsys: pytest.CaptureFixture, displays: List[Display]):
        assert main(['--set', '70', '--display', 'Dell ABC123']) == 0
        assert displays[2].handle.writes == [70]
        assert capsys.readouterr().out.strip() == 'Dell ABC123 -> 70%'

    def test_set_with_floor(self, displays: List[Display]):
        assert main(['-s', '0', '-m', '25']) == 0
        assert displays[1].handle.writes == [20]

    def test_raise(self, displays: List[Display]):
        assert main(['--raise', '10']) == 0
        assert displays[1].handle.writes == [48]

    def test_lower(self, displays: List[Display]):
        assert main(['--lower', '10', '--min', '45']) == 0
        assert displays[1].handle.writes == [36]

    def test_list(self, capsys: pytest.CaptureFixture):
        assert main(['--list']) == 0
        assert capsys.readouterr().out.splitlines() == [
            'Display 0: Acer XYZ789',
            'Display 1: BenQ DEF456',
            'Display 2: Dell ABC123',
        ]

    def test_list_verbose(self, capsys: pytest.CaptureFixture):
        assert main(['--list', '-v']) == 0
        out = capsys.readouterr().out
        assert 'Name: BenQ DEF456' in out
        assert 'Source: fake:BenQ DEF456' in out

    def test_list_empty(self, capsys: pytest.CaptureFixture, displays: List[Display]):
        displays.clear()
        assert main(['--list']) == 0
        assert capsys.readouterr().out.strip() == 'No monitors detected'

    def test_version(self, capsys: pytest.CaptureFixture):
        import ddcci_brightness
        assert main(['-V']) == 0
        assert capsys.readouterr().out.strip() == ddcci_brightness.__version__

    def test_missing_display(self, capsys: pytest.CaptureFixture):
        assert main(['--get', '--display', 'NoSuchModel']) == 1
        err = capsys.readouterr().err
        assert 'DeviceNotFoundError' in err
        assert 'NoSuchModel' in err

    def test_write_failure_verbose(self, capsys: pytest.CaptureFixture, displays: List[Display]):
        displays[1].handle.fail_writes = True
        assert main(['--set', '10', '-v']) == 1
        assert 'Traceback' in capsys.readouterr().err

    def test_no_arguments(self, capsys: pytest.CaptureFixture):
        assert main([]) == 0
        assert capsys.readouterr().out.strip() == 'No valid arguments'

    def test_platform_error(self, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch, mock_os_module):
        def enumerate_displays():
            raise RuntimeError('WMI query failed')

        monkeypatch.setattr(mock_os_module, 'enumerate_displays', enumerate_displays)
        assert main(['--get']) == 1
        assert capsys.readouterr().err.strip() == 'Display: Failed - RuntimeError: WMI query failed'
