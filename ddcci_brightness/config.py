'''
Contains globally applicable configuration variables.
'''
import inspect
from functools import wraps
from typing import Callable, Optional

from .types import IntPercentage


def default_params(func: Callable):
    '''
    This decorator sets default kwarg values using global configuration variables.
    Only the kwargs that the decorated function accepts are filled in.
    '''
    signature = inspect.signature(func)

    @wraps(func)
    def wrapper(*args, **kwargs):
        bound = signature.bind_partial(*args, **kwargs)
        if 'display' in signature.parameters:
            bound.arguments.setdefault('display', DEVICE_NAME)
        if 'floor' in signature.parameters:
            bound.arguments.setdefault('floor', MIN_BRIGHTNESS)
        return func(*bound.args, **bound.kwargs)
    return wrapper


DEVICE_NAME: Optional[str] = None
'''
Default value for the `display` parameter in top-level functions.

`None` means the first display that supports DDC/CI brightness control is used.
'''

MIN_BRIGHTNESS: IntPercentage = 0
'''
Default value for the `floor` parameter in top-level functions.
Brightness adjustments will never settle below this percentage.
'''
