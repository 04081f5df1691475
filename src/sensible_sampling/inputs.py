from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from .data import assemble_data, frame_to_sequences, load_table


@dataclass(frozen=True)
class ModelData:
    """Observation set plus lightweight plotting metadata.

    `values` is the named data mapping consumed by engines. `predictor` and
    `response` name the entries used by plots and bands; they are optional.
    """

    values: Mapping[str, Any]
    predictor: Optional[str] = None
    response: Optional[str] = None

    # Plotting metadata (optional)
    x_label: Optional[str] = None
    y_label: Optional[str] = None
    label: Optional[str] = None  # legend label for the data

    # Extra user metadata (e.g. true simulated parameters)
    meta: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_arrays(
        *,
        predictor: Optional[str] = None,
        response: Optional[str] = None,
        counts: str | Sequence[str] | None = "N",
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
        label: Optional[str] = None,
        meta: Optional[Mapping[str, Any]] = None,
        **values: Any,
    ) -> "ModelData":
        """Create ModelData from named arrays (and scalar counts)."""
        mapping = assemble_data(counts=counts, **values)
        return ModelData(
            values=mapping,
            predictor=predictor,
            response=response,
            x_label=x_label if x_label is not None else predictor,
            y_label=y_label if y_label is not None else response,
            label=label,
            meta=dict(meta or {}),
        )

    @staticmethod
    def from_table(
        table: Any,
        *,
        columns: Optional[Sequence[str]] = None,
        rename: Optional[Mapping[str, str]] = None,
        predictor: Optional[str] = None,
        response: Optional[str] = None,
        counts: str | Sequence[str] | None = "N",
        label: Optional[str] = None,
        meta: Optional[Mapping[str, Any]] = None,
        **read_kwargs: Any,
    ) -> "ModelData":
        """Create ModelData from a DataFrame or a tabular file path.

        `rename` maps column names to the names the model descriptor uses.
        """
        if isinstance(table, (str, Path)):
            frame = load_table(table, columns=columns, **read_kwargs)
            source = str(table)
        else:
            frame = table if columns is None else table.loc[:, list(columns)]
            source = None

        seqs, _ = frame_to_sequences(frame)
        if rename:
            seqs = {rename.get(k, k): v for k, v in seqs.items()}

        extra = dict(meta or {})
        if source is not None:
            extra.setdefault("source", source)
        return ModelData.from_arrays(
            predictor=predictor,
            response=response,
            counts=counts,
            label=label,
            meta=extra,
            **seqs,
        )

    @property
    def n(self) -> int:
        """Number of observations (shared sequence length)."""
        for v in self.values.values():
            a = np.asarray(v)
            if a.ndim == 1:
                return int(a.shape[0])
        return 0

    def as_dict(self) -> Dict[str, Any]:
        """Return a fresh copy of the data mapping."""
        return {k: (np.array(v) if isinstance(v, np.ndarray) else v) for k, v in self.values.items()}

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def with_meta(self, **meta: Any) -> "ModelData":
        """Return a copy with extra metadata entries."""
        return replace(self, meta={**self.meta, **meta})

    def with_labels(
        self,
        *,
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
        label: Optional[str] = None,
    ) -> "ModelData":
        """Return a copy with updated plotting labels."""
        return replace(
            self,
            x_label=self.x_label if x_label is None else x_label,
            y_label=self.y_label if y_label is None else y_label,
            label=self.label if label is None else label,
        )
