'''
Submodule containing types and type aliases used throughout the library.

Splitting these definitions into a seperate submodule allows for detailed
explanations without cluttering up the rest of the library.
'''
from typing import Optional

IntPercentage = int
'''
An integer between 0 and 100 (inclusive) that represents a brightness level.
Other than the implied bounds, this is just a normal integer.
'''

RawValue = int
'''
A brightness value in the display's own units, between 0 and the maximum
reported by the display (inclusive).
Most displays report a maximum of 100, in which case raw values and
percentages happen to line up, but this is not guaranteed.
'''

DisplayName = Optional[str]
'''
The model name of a display, as reported in the display name descriptor of its EDID.
For example: `'BenQ GL2450H'` or `'DELL U2415'`.

`None` means "no particular display". Wherever a `DisplayName` is used to pick a
display, `None` selects the first display that responds to brightness queries.
'''
