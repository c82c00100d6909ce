from ..rinex_io.record import Record


def merge_mut(lhs: Record, rhs: Record) -> None:
    """
    Merges `rhs` into `lhs`. Epochs only found in `rhs` are inserted as they
    are. On shared epochs `lhs` observations are kept and `rhs` only fills
    the (SV, observable) pairs and the clock offset `lhs` is missing.
    """
    for key, rhs_entry in rhs.items():
        lhs_entry = lhs.get(key)
        if lhs_entry is None:
            lhs.insert(key, rhs_entry.copy())
            continue
        if lhs_entry.clock_offset is None:
            lhs_entry.clock_offset = rhs_entry.clock_offset
        for obs_key, data in rhs_entry.copy().observations.items():
            lhs_entry.observations.setdefault(obs_key, data)


def merge(lhs: Record, rhs: Record) -> Record:
    merged = lhs.copy()
    merge_mut(merged, rhs)
    return merged
