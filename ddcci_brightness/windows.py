import logging
import threading
import time
from contextlib import contextmanager
from ctypes import POINTER, WINFUNCTYPE, Structure, WinError, byref, windll
from ctypes.wintypes import (BOOL, BYTE, DWORD, HANDLE, HDC, HMONITOR, LPARAM,
                             RECT, WCHAR)
from typing import Dict, Generator, List, Optional, Tuple

import pythoncom
import pywintypes
import win32api
import win32con
import wmi

from .exceptions import EDIDParseError, format_exc
from .helpers import EDID, DDCHandle, Display

_logger = logging.getLogger(__name__)


def _wmi_init():
    '''internal function to create and return a wmi instance'''
    # WMI calls don't work in new threads so we have to run this check
    if threading.current_thread() != threading.main_thread():
        pythoncom.CoInitialize()
    return wmi.WMI(namespace='wmi')


def _device_uid(device_id: str) -> str:
    # '\\?\DISPLAY#BNQ7F4B#5&24bdd39e&0&UID10000#{...}' -> '5&24bdd39e&0&UID10000'
    return device_id.split('#')[2]


def enum_display_devices() -> Generator[win32api.PyDISPLAY_DEVICEType, None, None]:
    '''
    Yields all display devices connected to the computer
    '''
    for monitor_enum in win32api.EnumDisplayMonitors():
        pyhandle = monitor_enum[0]
        monitor_info = win32api.GetMonitorInfo(pyhandle)
        for adaptor_index in range(5):
            try:
                # EDD_GET_DEVICE_INTERFACE_NAME flag to populate DeviceID field
                device = win32api.EnumDisplayDevices(
                    monitor_info['Device'], adaptor_index, 1)
            except pywintypes.error:
                _logger.debug(
                    f'failed to get display device {monitor_info["Device"]} on adaptor index {adaptor_index}')
            else:
                yield device
                break


def _laptop_display_uids(wmi_instance) -> List[str]:
    '''Laptop displays are controlled through WMI rather than DDC/CI, so they are skipped'''
    try:
        return [
            i.InstanceName.replace('_0', '', 1).split('\\')[2]
            for i in wmi_instance.WmiMonitorBrightness()
        ]
    except Exception as e:
        # don't do specific exception classes here because WMI does not play ball with it
        _logger.warning(f'failed to gather list of laptop displays - {format_exc(e)}')
        return []


def _is_ddc_device(device, laptop_displays: List[str]) -> bool:
    return bool(
        device.StateFlags & win32con.DISPLAY_DEVICE_ATTACHED_TO_DESKTOP
        and _device_uid(device.DeviceID) not in laptop_displays
    )


class VCP(DDCHandle):
    '''Talks DDC/CI to a display using the Windows monitor configuration API'''
    _MONITORENUMPROC = WINFUNCTYPE(BOOL, HMONITOR, HDC, POINTER(RECT), LPARAM)

    _logger = _logger.getChild('VCP')

    max_tries: int = 50
    '''How many times to attempt each VCP call before giving up'''

    class _PHYSICAL_MONITOR(Structure):
        '''internal class, do not call'''
        _fields_ = [('handle', HANDLE),
                    ('description', WCHAR * 128)]

    def __init__(self, index: int):
        '''
        Args:
            index: the index of the display amongst all DDC/CI capable
                physical monitors, as yielded by `iter_physical_monitors`
        '''
        self.index = index

    def __repr__(self):
        return f'{self.__class__.__name__}({self.index})'

    @classmethod
    def iter_physical_monitors(cls, start: int = 0) -> Generator[HANDLE, None, None]:
        '''
        A generator to iterate through all physical monitors, yielding their handles.
        Handles are destroyed once the generator moves past them or is closed,
        so they must not be used after that point.
        It is not recommended to use this function unless you are familiar with `ctypes` and `windll`

        Args:
            start: skip the first X handles

        Raises:
            ctypes.WinError: upon failure to enumerate through the monitors
        '''
        def callback(hmonitor, *_):
            monitors.append(HMONITOR(hmonitor))
            return True

        monitors: List[HMONITOR] = []
        if not windll.user32.EnumDisplayMonitors(None, None, cls._MONITORENUMPROC(callback), None):
            cls._logger.error('EnumDisplayMonitors failed')
            raise WinError(None, 'EnumDisplayMonitors failed')

        # user index keeps track of valid monitors
        user_index = 0
        # monitor index keeps track of valid and pseudo monitors
        monitor_index = 0
        display_devices = list(enum_display_devices())
        laptop_displays = _laptop_display_uids(_wmi_init())

        for monitor in monitors:
            count = DWORD()
            if not windll.dxva2.GetNumberOfPhysicalMonitorsFromHMONITOR(monitor, byref(count)):
                raise WinError(None, 'call to GetNumberOfPhysicalMonitorsFromHMONITOR returned invalid result')
            if count.value == 0:
                continue

            physical_array = (cls._PHYSICAL_MONITOR * count.value)()
            if not windll.dxva2.GetPhysicalMonitorsFromHMONITOR(monitor, count.value, physical_array):
                raise WinError(None, 'call to GetPhysicalMonitorsFromHMONITOR returned invalid result')
            try:
                for item in physical_array:
                    if _is_ddc_device(display_devices[monitor_index], laptop_displays):
                        if user_index >= start:
                            yield item.handle
                        user_index += 1
                    monitor_index += 1
            finally:
                for item in physical_array:
                    windll.dxva2.DestroyPhysicalMonitor(item.handle)

    @contextmanager
    def _physical_monitor(self):
        monitors = self.iter_physical_monitors(start=self.index)
        try:
            handle = next(monitors, None)
            if handle is None:
                raise WinError(None, f'physical monitor {self.index} is no longer connected')
            yield handle
        finally:
            monitors.close()

    def get_vcp_feature(self, code: int) -> Tuple[int, int]:
        cur_out, max_out = DWORD(), DWORD()
        with self._physical_monitor() as handle:
            for attempt in range(self.max_tries):
                if windll.dxva2.GetVCPFeatureAndVCPFeatureReply(
                    handle, BYTE(code), None, byref(cur_out), byref(max_out)
                ):
                    return cur_out.value, max_out.value
                time.sleep(0.02 if attempt < 20 else 0.1)

        self._logger.error(f'failed to get VCP feature {code:#04x} for display:{self.index} after {self.max_tries} tries')
        raise WinError(None, f'failed to get VCP feature {code:#04x} after {self.max_tries} tries')

    def set_vcp_feature(self, code: int, value: int):
        with self._physical_monitor() as handle:
            for attempt in range(self.max_tries):
                if windll.dxva2.SetVCPFeature(handle, BYTE(code), DWORD(value)):
                    return
                time.sleep(0.02 if attempt < 20 else 0.1)

        self._logger.error(f'failed to set display:{self.index} {code:#04x}->{value} after {self.max_tries} tries')
        raise WinError(None, f'failed to set VCP feature {code:#04x} after {self.max_tries} tries')


def _edids_by_uid(wmi_instance) -> Dict[str, Optional[str]]:
    edids: Dict[str, Optional[str]] = {}
    for monitor in wmi_instance.WmiMonitorDescriptorMethods():
        uid = monitor.InstanceName.replace('_0', '', 1).split('\\')[2]
        try:
            edids[uid] = ''.join(f'{char:02x}' for char in monitor.WmiGetMonitorRawEEdidV1Block(0)[0])
        except Exception as e:
            _logger.warning(f'failed to get EDID string for {monitor.InstanceName} - {format_exc(e)}')
            edids[uid] = None
    return edids


def enumerate_displays() -> List[Display]:
    '''
    Returns a `Display` for every physical monitor that could be controlled over DDC/CI,
    in the same order as `VCP.iter_physical_monitors`.

    Display names come from the EDIDs reported by WMI.
    '''
    wmi_instance = _wmi_init()
    laptop_displays = _laptop_display_uids(wmi_instance)
    edids = _edids_by_uid(wmi_instance)

    displays = []
    ddc_devices = [d for d in enum_display_devices() if _is_ddc_device(d, laptop_displays)]
    for index, device in enumerate(ddc_devices):
        uid = _device_uid(device.DeviceID)
        display = Display(handle=VCP(index), source=f'VCP:{index}')
        # 'BNQ7F4B' -> 'BNQ'
        display.manufacturer_id = device.DeviceID.split('#')[1][:3] or None

        edid = edids.get(uid)
        if edid is not None:
            try:
                display.manufacturer_id, display.model_name, display.serial = EDID.parse(edid)
                display.edid = edid
            except EDIDParseError as e:
                _logger.warning(f'exception parsing edid str for {uid} - {format_exc(e)}')

        displays.append(display)

    _logger.debug(f'found {len(displays)} physical monitors')
    return displays
