"""
Mask filters: retain or discard subsets of an observation record.

A mask is written `<prefix><operand><value>`, for example `c=GPS,GAL`,
`t>2020-01-01T00:00:00 GPST` or `snr>=35`.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, List

from ..gnss.constellation import Constellation
from ..gnss.sv import SV
from ..rinex_io.record import ObservationData, ObservationKey, Record
from .errors import InvalidMaskError, InvalidOperandError
from .token import MaskToken, TokenKind


class MaskOperand(Enum):
    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUALS = ">="
    LOWER_THAN = "<"
    LOWER_EQUALS = "<="

    @staticmethod
    def from_str(s: str) -> "MaskOperand":
        """Parses the operand the description starts with."""
        # two-character operands first
        for operand in (
            MaskOperand.GREATER_EQUALS,
            MaskOperand.LOWER_EQUALS,
            MaskOperand.NOT_EQUALS,
            MaskOperand.EQUALS,
            MaskOperand.GREATER_THAN,
            MaskOperand.LOWER_THAN,
        ):
            if s.startswith(operand.value):
                return operand
        raise InvalidOperandError(f"Invalid mask operand: `{s}`")

    @property
    def formatted_len(self) -> int:
        return len(self.value)

    def compare(self, lhs, rhs) -> bool:
        match self:
            case MaskOperand.EQUALS:
                return lhs == rhs
            case MaskOperand.NOT_EQUALS:
                return lhs != rhs
            case MaskOperand.GREATER_THAN:
                return lhs > rhs
            case MaskOperand.GREATER_EQUALS:
                return lhs >= rhs
            case MaskOperand.LOWER_THAN:
                return lhs < rhs
            case MaskOperand.LOWER_EQUALS:
                return lhs <= rhs

    def __invert__(self) -> "MaskOperand":
        return _NEGATED_OPERANDS[self]

    def __str__(self) -> str:
        return self.value


_NEGATED_OPERANDS = {
    MaskOperand.EQUALS: MaskOperand.NOT_EQUALS,
    MaskOperand.NOT_EQUALS: MaskOperand.EQUALS,
    MaskOperand.GREATER_THAN: MaskOperand.LOWER_EQUALS,
    MaskOperand.GREATER_EQUALS: MaskOperand.LOWER_THAN,
    MaskOperand.LOWER_THAN: MaskOperand.GREATER_EQUALS,
    MaskOperand.LOWER_EQUALS: MaskOperand.GREATER_THAN,
}

# description prefix -> token parser; longer prefixes sharing a first letter come first
_MASK_PREFIXES: List[tuple] = [
    ("dt", MaskToken.parse_duration),
    ("sta", MaskToken.parse_stations),
    ("snr", MaskToken.parse_snr),
    ("sv", MaskToken.parse_sv),
    ("dom", MaskToken.parse_domes_sites),
    ("cos", MaskToken.parse_cospar),
    ("t", MaskToken.parse_epoch),
    ("e", MaskToken.parse_elevation),
    ("az", MaskToken.parse_azimuth),
    ("c", MaskToken.parse_constellations),
    ("f", MaskToken.parse_frequencies),
    ("o", MaskToken.parse_observables),
]


@dataclass
class MaskFilter:
    token: MaskToken
    operand: MaskOperand = MaskOperand.EQUALS

    @staticmethod
    def from_str(s: str) -> "MaskFilter":
        """
        Parses a mask description.

        Args:
            s: `<prefix><operand><value>`, where prefix is one of `dt`, `sta`,
                `snr`, `sv`, `dom`, `cos`, `t`, `e`, `az`, `c`, `f`, `o`

        Returns:
            the mask filter
        """
        text = s.strip()
        for prefix, parse_token in _MASK_PREFIXES:
            if text.startswith(prefix):
                operand = MaskOperand.from_str(text[len(prefix):])
                token = parse_token(text[len(prefix) + operand.formatted_len:])
                return MaskFilter(token, operand)
        raise InvalidMaskError(f"Invalid mask description: `{s}`")

    def __invert__(self) -> "MaskFilter":
        return MaskFilter(self.token, ~self.operand)


def _first_prn_of(svs: List[SV], sv: SV) -> int | None:
    for sv_i in svs:
        if sv_i.constellation == sv.constellation:
            return sv_i.prn
    return None


def _observation_predicate(
    mask_filter: MaskFilter,
) -> Callable[[ObservationKey, ObservationData], bool] | None:
    """
    Per-observation retention rule of `mask_filter`, or None when the mask
    does not act on single observations.
    """
    token = mask_filter.token
    operand = mask_filter.operand

    if token.kind == TokenKind.SNR:
        snr_db = token.value
        return lambda key, data: data.snr is not None and operand.compare(data.snr.to_db(), snr_db)

    if token.kind == TokenKind.SV:
        svs: List[SV] = token.value
        if operand == MaskOperand.EQUALS:
            return lambda key, data: key.sv in svs
        if operand == MaskOperand.NOT_EQUALS:
            return lambda key, data: key.sv not in svs

        def compare_prn(key: ObservationKey, data: ObservationData) -> bool:
            prn = _first_prn_of(svs, key.sv)
            if prn is None:
                return True
            return operand.compare(key.sv.prn, prn)

        return compare_prn

    if token.kind == TokenKind.OBSERVABLES:
        observables: List[str] = token.value
        if operand == MaskOperand.EQUALS:
            return lambda key, data: key.observable in observables
        if operand == MaskOperand.NOT_EQUALS:
            return lambda key, data: key.observable not in observables
        return None

    if token.kind == TokenKind.CONSTELLATIONS:
        constellations: List[Constellation] = token.value
        # the generic SBAS entry selects every SBAS system
        broad_sbas = Constellation.SBAS in constellations

        def selected(key: ObservationKey) -> bool:
            constellation = key.sv.constellation
            return constellation in constellations or (broad_sbas and constellation.is_sbas())

        if operand == MaskOperand.EQUALS:
            return lambda key, data: selected(key)
        if operand == MaskOperand.NOT_EQUALS:
            return lambda key, data: not selected(key)
        return None

    return None


def mask_mut(record: Record, mask_filter: MaskFilter) -> None:
    """
    Applies `mask_filter` to `record` in place. Epoch masks act on whole
    entries; SNR, SV, observable and constellation masks act on single
    observations, after which entries left with neither observations nor
    clock offset are dropped. Other tokens do not apply to observation data.
    """
    token = mask_filter.token
    if token.kind == TokenKind.EPOCH:
        record.retain(lambda key, entry: mask_filter.operand.compare(key.epoch, token.value))
        return

    predicate = _observation_predicate(mask_filter)
    if predicate is None:
        logging.debug(f"Mask {token.kind.value} {mask_filter.operand} does not apply to observations")
        return

    def retain_entry(key, entry) -> bool:
        entry.retain_observations(predicate)
        return not entry.is_empty()

    record.retain(retain_entry)


def mask(record: Record, mask_filter: MaskFilter) -> Record:
    """Returns a masked copy of `record`."""
    masked = record.copy()
    mask_mut(masked, mask_filter)
    return masked
