from typing import List

import pytest

import ddcci_brightness as ddc
from ddcci_brightness.helpers import Display

from .helpers import fake_display
from .mocks import os_module_mock


@pytest.fixture
def displays() -> List[Display]:
    '''An unsupported display followed by two supported ones'''
    return [
        fake_display('Acer XYZ789', supported=False),
        fake_display('BenQ DEF456', current=40, maximum=80),
        fake_display('Dell ABC123', current=50, maximum=100),
    ]


@pytest.fixture(autouse=True)
def mock_os_module(monkeypatch: pytest.MonkeyPatch, displays: List[Display]):
    monkeypatch.setattr(os_module_mock, 'DISPLAYS', displays)
    monkeypatch.setattr(ddc, '_OS_MODULE', os_module_mock)
    return os_module_mock

