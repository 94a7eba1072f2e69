def format_exc(e: Exception) -> str:
    '''@private'''
    return f'{type(e).__name__}: {e}'


class DDCBrightnessError(Exception):
    '''
    Generic error class designed to make catching errors under one umbrella easy.
    '''
    ...


class EDIDParseError(DDCBrightnessError):
    '''Unparsable/invalid EDID'''
    ...


class I2CValidationError(DDCBrightnessError):
    '''I2C data validation failed'''
    ...


class DeviceNotFoundError(DDCBrightnessError, LookupError):
    '''
    The requested display does not exist or cannot have its brightness
    adjusted over DDC/CI.

    Example:
        ```python
        try:
            backend = Ddcci.try_new('BenQ GL2450H')
        except DeviceNotFoundError as e:
            print('could not use', e.device_name)
        ```
    '''
    def __init__(self, device_name: str):
        self.device_name: str = device_name
        '''The requested display name, or `"N/A"` if no name was requested'''
        super().__init__(f'requested device {device_name!r} does not exist')

    def __reduce__(self):
        return self.__class__, (self.device_name,)


class ProtocolWriteError(DDCBrightnessError):
    '''
    Writing a brightness value to the display failed.
    The underlying transport error is available as `__cause__`.
    '''
    def __init__(self, message: str, value: int):
        self.value: int = value
        '''The raw value that failed to be written'''
        super().__init__(message)

    def __reduce__(self):
        return self.__class__, (str(self), self.value)
