"""
Single character status fields of the RINEX observation record: the epoch
flag, the loss of lock indicator (LLI) and the signal strength indicator.
"""

from enum import IntEnum, IntFlag
from typing import Optional

from .errors import EpochFlagParsingError


class EpochFlag(IntEnum):
    OK = 0
    POWER_FAILURE = 1
    ANTENNA_BEING_MOVED = 2
    NEW_SITE_OCCUPATION = 3
    HEADER_INFORMATION_FOLLOWS = 4
    EXTERNAL_EVENT = 5
    CYCLE_SLIP = 6

    @staticmethod
    def from_str(s: str) -> "EpochFlag":
        flag_str = s.strip()
        if len(flag_str) != 1 or not flag_str.isdigit() or int(flag_str) > 6:
            raise EpochFlagParsingError(f"Invalid epoch flag: `{s}`")
        return EpochFlag(int(flag_str))

    def has_observations(self) -> bool:
        """Only these epochs are followed by an observation block."""
        return self in (EpochFlag.OK, EpochFlag.POWER_FAILURE, EpochFlag.CYCLE_SLIP)

    def is_event(self) -> bool:
        return not self.has_observations()


class LliFlags(IntFlag):
    OK_OR_UNKNOWN = 0x00
    LOCK_LOSS = 0x01
    HALF_CYCLE_SLIP = 0x02
    UNDER_ANTI_SPOOFING = 0x04

    @staticmethod
    def from_char(c: str) -> Optional["LliFlags"]:
        """Decodes one LLI digit; blanks and unknown bit patterns give None."""
        if len(c) != 1 or not c.isdigit():
            return None
        bits = int(c)
        if bits & ~0x07:
            return None
        return LliFlags(bits)


# upper bound of each SNR class, dB-Hz
SNR_CLASS_TO_DB = {
    0: 0.0,
    1: 12.0,
    2: 17.0,
    3: 23.0,
    4: 29.0,
    5: 35.0,
    6: 41.0,
    7: 47.0,
    8: 53.0,
    9: 54.0,
}


class SNR(IntEnum):
    """
    RINEX signal strength classes, 1 (< 12 dB-Hz) to 9 (>= 54 dB-Hz).
    Class 0 means unknown / not applicable.
    """
    DBHZ0 = 0
    DBHZ12 = 1
    DBHZ12_17 = 2
    DBHZ18_23 = 3
    DBHZ24_29 = 4
    DBHZ30_35 = 5
    DBHZ36_41 = 6
    DBHZ42_47 = 7
    DBHZ48_53 = 8
    DBHZ54 = 9

    @staticmethod
    def from_char(c: str) -> Optional["SNR"]:
        if len(c) != 1 or not c.isdigit():
            return None
        return SNR(int(c))

    @staticmethod
    def from_db(db: float) -> "SNR":
        if db < 12.0:
            return SNR.DBHZ12
        for snr in SNR:
            if snr >= SNR.DBHZ12_17 and db <= SNR_CLASS_TO_DB[snr]:
                return snr
        return SNR.DBHZ54

    def to_db(self) -> float:
        return SNR_CLASS_TO_DB[int(self)]

    def weak(self) -> bool:
        return SNR.DBHZ0 < self < SNR.DBHZ30_35

    def strong(self) -> bool:
        return self >= SNR.DBHZ30_35

    def excellent(self) -> bool:
        return self >= SNR.DBHZ42_47
