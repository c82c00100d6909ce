from .duration import DURATION_UNITS, parse_duration

from .epoch import (
    NS_PER_SECOND,
    Epoch,
    timedelta_to_nanoseconds,
    nanoseconds_to_timedelta,
)

from .gpst import (
    GPS_EPOCH,
    GPS_TAI_OFFSET,
    SECONDS_IN_WEEK,
    convert_epoch_to_gps_seconds,
    convert_gps_seconds_to_epoch,
    convert_epoch_array_to_gps_seconds_array,
    convert_gps_seconds_to_epoch_list,
    gps_week_and_tow,
)

from .leap_seconds import OffsetEpoch, NTP_EPOCH, LEAP_SECOND_EPOCHS, parse_tai_leap_seconds, utc_tai_offset

from .timescale import TimeScale
