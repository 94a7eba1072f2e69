'''
Stands in for the platform specific module (`ddcci_brightness.linux` or `ddcci_brightness.windows`)
'''
from typing import List

from ddcci_brightness.helpers import Display

DISPLAYS: List[Display] = []
'''Replaced with fresh fake displays for every test, see `conftest.py`'''


def enumerate_displays() -> List[Display]:
    return list(DISPLAYS)
