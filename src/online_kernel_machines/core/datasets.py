"""
Example streams backed by numeric CSV files.

ExampleStream keeps examples in file order and replays them in that order,
which makes every training run over it deterministic.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from .items import Example


class ExampleStream:
    """
    Ordered, replayable stream of examples.

    Args:
        examples: Examples in stream order.
        name: Optional label (e.g. the source file) used in reprs and logs.
    """

    def __init__(self, examples: Sequence[Example], name: Optional[str] = None):
        self.examples: List[Example] = list(examples)
        self.name = name

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[Example]:
        return iter(self.examples)

    def __getitem__(self, idx: int) -> Example:
        return self.examples[idx]

    def get_subset_iterator(self, indices: Sequence[int]) -> Iterator[Example]:
        """Iterate over the examples at ``indices`` in the given order."""
        for idx in indices:
            yield self.examples[idx]

    @property
    def dimension(self) -> Optional[int]:
        return self.examples[0].dimension if self.examples else None

    def __repr__(self) -> str:
        label = f"name={self.name!r}, " if self.name else ""
        return f"ExampleStream({label}examples={len(self.examples)}, dim={self.dimension})"


def load_examples_csv(
    path: Union[str, Path],
    label_column: Optional[Union[str, int]] = -1,
    feature_columns: Optional[Sequence[Union[str, int]]] = None,
    has_header: bool = True,
) -> ExampleStream:
    """
    Load a numeric CSV file into an ExampleStream.

    Args:
        path: CSV file path.
        label_column: Column holding the label, by header name or index
            (negative indices count from the end). ``None`` loads unlabelled
            examples for novelty detection.
        feature_columns: Columns used as features. Defaults to every column
            except the label column.
        has_header: Whether the first row is a header.

    Returns:
        ExampleStream in file order. Each example's metadata records the
        source file and the 0-based data row.

    Raises:
        ValueError: If a referenced column does not exist or a cell is not
            numeric.
    """
    path = Path(path)
    with open(path, "r", newline="") as f:
        rows = [row for row in csv.reader(f) if row]

    header: Optional[List[str]] = None
    if has_header and rows:
        header, rows = rows[0], rows[1:]

    num_cols = len(header) if header is not None else (len(rows[0]) if rows else 0)

    def _index(col: Union[str, int]) -> int:
        if isinstance(col, str):
            if header is None or col not in header:
                raise ValueError(f"Column {col!r} not found in {path}")
            return header.index(col)
        idx = col if col >= 0 else num_cols + col
        if not 0 <= idx < num_cols:
            raise ValueError(f"Column index {col} out of range for {num_cols} columns")
        return idx

    label_idx = _index(label_column) if label_column is not None else None
    if feature_columns is not None:
        feature_idx = [_index(c) for c in feature_columns]
    else:
        feature_idx = [i for i in range(num_cols) if i != label_idx]

    examples = []
    for row_num, row in enumerate(rows):
        try:
            vector = [float(row[i]) for i in feature_idx]
            label = float(row[label_idx]) if label_idx is not None else None
        except (ValueError, IndexError) as exc:
            raise ValueError(f"{path}: bad data row {row_num}: {exc}") from exc
        examples.append(
            Example(vector, label, metadata={"source": path.name, "row": row_num})
        )

    return ExampleStream(examples, name=path.name)
