"""
Errors raised while parsing or formatting RINEX observation records.

All of them are `ValueError`s so that callers handling malformed RINEX text
generically keep working.
"""


class RinexObservationError(ValueError):
    pass


class EmptyLineError(RinexObservationError):
    def __init__(self, message: str = "empty epoch content") -> None:
        super().__init__(message)


class NumSatParsingError(RinexObservationError):
    pass


class MissingSvDescriptionError(RinexObservationError):
    pass


class MissingObservationDescriptionError(RinexObservationError):
    pass


class InvalidConstellationDefinitionError(RinexObservationError):
    pass


class EpochParsingError(RinexObservationError):
    pass


class EpochFlagParsingError(RinexObservationError):
    pass


class SvParsingError(RinexObservationError):
    pass


class ConstellationParsingError(RinexObservationError):
    pass


class HeaderParsingError(RinexObservationError):
    pass
