from pytest import MonkeyPatch

from ddcci_brightness import config


def test_default_params(monkeypatch: MonkeyPatch):
    func = config.default_params(lambda display=None, floor=None: {'display': display, 'floor': floor})

    assert func() == {
        'display': config.DEVICE_NAME,
        'floor': config.MIN_BRIGHTNESS,
    }, 'sets default kwarg values'

    monkeypatch.setattr(config, 'DEVICE_NAME', 'Dell ABC123')
    monkeypatch.setattr(config, 'MIN_BRIGHTNESS', 15)
    assert func() == {'display': 'Dell ABC123', 'floor': 15}

    assert func(display=None, floor=None) == {
        'display': None, 'floor': None
    }, 'should not override kwargs'

    assert func('BenQ DEF456') == {'display': 'BenQ DEF456', 'floor': 15}, 'should respect positional args'


def test_default_params_only_fills_accepted_kwargs(monkeypatch: MonkeyPatch):
    monkeypatch.setattr(config, 'DEVICE_NAME', 'Dell ABC123')
    func = config.default_params(lambda display=None: display)
    assert func() == 'Dell ABC123'
