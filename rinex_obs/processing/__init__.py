from .errors import (
    FilterParsingError,
    InvalidOperandError,
    InvalidMaskError,
    InvalidEpochError,
    InvalidDurationError,
    InvalidElevationError,
    InvalidAzimuthError,
    InvalidConstellationError,
    InvalidDOMESError,
    InvalidFrequencyError,
    InvalidFilterError,
    InvalidDecimationRatioError,
)
from .token import MaskToken, TokenKind
from .masking import MaskFilter, MaskOperand, mask, mask_mut
from .merge import merge, merge_mut
from .split import find_gap_segments, split, split_dt
from .resampling import (
    DecimationFilter,
    DecimationType,
    ResamplingFilter,
    decimate_by_interval_mut,
    decimate_by_ratio_mut,
    decimate_mut,
    resample,
    resample_mut,
)
from .filter import Filter
