from __future__ import annotations

from collections.abc import Sequence

import numpy as np


class PredictionValues:
    """Per-leaf statistic vectors with an explicit emptiness flag per leaf.

    A leaf whose input vector is ``None`` or has length zero is empty; its row
    in ``values`` is all zeros and must not be read as a statistic. Both arrays
    are read-only once the table is built.
    """

    def __init__(
        self,
        values: Sequence[Sequence[float] | np.ndarray | None],
        num_types: int,
    ) -> None:
        if num_types < 0:
            raise ValueError("num_types must be non-negative")

        num_nodes = len(values)
        table = np.zeros((num_nodes, num_types), dtype=np.float64)
        empty = np.ones(num_nodes, dtype=bool)

        for node, node_values in enumerate(values):
            if node_values is None or len(node_values) == 0:
                continue
            if len(node_values) != num_types:
                raise ValueError(
                    f"leaf {node} has {len(node_values)} values, expected {num_types}"
                )
            table[node] = np.asarray(node_values, dtype=np.float64)
            empty[node] = False

        table.flags.writeable = False
        empty.flags.writeable = False
        self._values = table
        self._empty = empty
        self._num_types = int(num_types)

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def empty_mask(self) -> np.ndarray:
        return self._empty

    def get_num_nodes(self) -> int:
        return int(self._values.shape[0])

    def get_num_types(self) -> int:
        return self._num_types

    def empty(self, node: int) -> bool:
        return bool(self._empty[node])

    def get(self, node: int, value_type: int) -> float:
        return float(self._values[node, value_type])

    def get_values(self, node: int) -> np.ndarray:
        return self._values[node]
