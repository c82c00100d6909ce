"""
Errors raised while parsing mask and filter descriptions.
"""


class FilterParsingError(ValueError):
    pass


class InvalidOperandError(FilterParsingError):
    pass


class InvalidMaskError(FilterParsingError):
    pass


class InvalidEpochError(FilterParsingError):
    pass


class InvalidDurationError(FilterParsingError):
    pass


class InvalidElevationError(FilterParsingError):
    pass


class InvalidAzimuthError(FilterParsingError):
    pass


class InvalidConstellationError(FilterParsingError):
    pass


class InvalidDOMESError(FilterParsingError):
    pass


class InvalidFrequencyError(FilterParsingError):
    pass


class InvalidFilterError(FilterParsingError):
    pass


class InvalidDecimationRatioError(FilterParsingError):
    pass
