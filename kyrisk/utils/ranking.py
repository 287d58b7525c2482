# kyrisk/utils/ranking.py
from typing import List, Sequence
import numpy as np


def stable_rank_desc(scores: Sequence[float]) -> List[int]:
    """
    Indices that order `scores` high -> low. Equal scores keep their input
    order (mergesort under the hood), which the review screen relies on.
    """
    if not scores:
        return []
    arr = np.asarray([float(s) for s in scores], dtype=float)
    arr = np.nan_to_num(arr, nan=-np.inf)
    return [int(i) for i in np.argsort(-arr, kind="stable")]
