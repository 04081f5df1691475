from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

_READERS = {
    ".csv": ("read_csv", {}),
    ".tsv": ("read_csv", {"sep": "\t"}),
    ".txt": ("read_csv", {"sep": r"\s+"}),
    ".parquet": ("read_parquet", {}),
    ".json": ("read_json", {}),
}


def assemble_data(
    mapping: Optional[Mapping[str, Any]] = None,
    *,
    counts: str | Sequence[str] | None = "N",
    **sequences: Any,
) -> Dict[str, Any]:
    """Build the named data mapping handed to an engine.

    Sequences (1D array-likes) are converted to numpy arrays and must all share
    one length. That length is added under each name in `counts` unless the
    caller already supplied it. Scalars (dimension counts, hyper-parameters)
    pass through unchanged.

    Names the model descriptor references but that are missing here are not
    detected: the engine reports them when it is invoked.
    """
    items: Dict[str, Any] = dict(mapping or {})
    for k in sequences:
        if k in items:
            raise ValueError(f"Data name {k!r} given twice.")
    items.update(sequences)

    out: Dict[str, Any] = {}
    lengths: Dict[str, int] = {}
    for name, value in items.items():
        if np.isscalar(value):
            out[name] = value
            continue
        arr = _as_numeric_array(name, value)
        if arr.ndim == 0:
            out[name] = arr.item()
            continue
        if arr.ndim == 1:
            lengths[name] = int(arr.shape[0])
        out[name] = arr

    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{k}={v}" for k, v in lengths.items())
        raise ValueError(f"Observation sequences must share one length; got {detail}.")

    if counts is not None and lengths:
        n = next(iter(lengths.values()))
        names = (counts,) if isinstance(counts, str) else tuple(counts)
        for c in names:
            if c in out:
                if int(out[c]) != n:
                    raise ValueError(
                        f"Count {c!r}={out[c]} disagrees with sequence length {n}."
                    )
                continue
            out[c] = n

    logger.debug("assembled data names=%s lengths=%s", sorted(out), lengths)
    return out


def _as_numeric_array(name: str, value: Any) -> np.ndarray:
    arr = np.asarray(value)
    if arr.dtype == object:
        raise TypeError(f"Data entry {name!r} is not a numeric array.")
    if arr.dtype.kind == "b":
        return arr.astype(int)
    if arr.dtype.kind in "iu":
        return arr.astype(np.int64)
    if arr.dtype.kind == "f":
        return arr.astype(float)
    raise TypeError(f"Data entry {name!r} has unsupported dtype {arr.dtype}.")


def load_table(
    path: str | Path,
    *,
    columns: Optional[Sequence[str]] = None,
    **read_kwargs: Any,
):
    """Read a tabular data file (rows = observations, columns = fields).

    The reader is picked from the file suffix (.csv, .tsv, .txt whitespace
    separated, .parquet, .json); extra keyword arguments go to pandas.
    """
    import pandas as pd

    path = Path(path)
    suffix = path.suffix.lower()
    try:
        reader_name, defaults = _READERS[suffix]
    except KeyError as e:
        raise ValueError(
            f"Unsupported table format {suffix!r}. Available: {tuple(_READERS)}"
        ) from e

    kwargs = dict(defaults)
    kwargs.update(read_kwargs)
    frame = getattr(pd, reader_name)(path, **kwargs)

    if columns is not None:
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise KeyError(f"Columns not found in {path.name}: {missing}")
        frame = frame.loc[:, list(columns)]

    logger.info("loaded %s: %d rows x %d columns", path.name, frame.shape[0], frame.shape[1])
    return frame


def frame_to_sequences(
    frame: Any, columns: Optional[Sequence[str]] = None
) -> Tuple[Dict[str, np.ndarray], int]:
    """Split a DataFrame into name -> 1D array, plus the row count."""
    names = list(frame.columns) if columns is None else list(columns)
    seqs = {str(n): frame[n].to_numpy() for n in names}
    return seqs, int(frame.shape[0])
