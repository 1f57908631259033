"""
Minimum-cost bipartite assignment (Hungarian / Kuhn-Munkres algorithm).

The implementation follows the O(n^2 m) shortest augmenting path formulation
with row and column potentials; the inner scan over the columns is
vectorized with numpy.
"""

import numpy as np


def hungarian(cost) -> list[int]:
    """
    Solve the assignment problem for a (possibly rectangular) cost matrix.

    Args:
        cost: n x m matrix (nested sequences or numpy array) of finite costs

    Returns:
        For each row, the index of the assigned column, or -1 if the row is
        unassigned (only possible when n > m). An empty matrix yields an
        empty list.

    Example:
        >>> hungarian([[4, 1, 3], [2, 0, 5], [3, 2, 2]])
        [1, 0, 2]
    """
    c = np.asarray(cost, dtype=float)
    if c.ndim != 2 or c.shape[0] == 0:
        return []
    if c.shape[1] == 0:
        return [-1] * c.shape[0]

    transposed = c.shape[0] > c.shape[1]
    if transposed:
        c = c.T

    row_to_col = _solve(c)
    if not transposed:
        return row_to_col

    res = [-1] * c.shape[1]
    for col, row in enumerate(row_to_col):
        res[row] = col
    return res


def _solve(c: np.ndarray) -> list[int]:
    # Requires n <= m. Indices of u, v, p and way are 1-based, 0 is a sentinel.
    n, m = c.shape
    u = np.zeros(n + 1)
    v = np.zeros(m + 1)
    p = np.zeros(m + 1, dtype=int)  # p[j]: row assigned to column j
    way = np.zeros(m + 1, dtype=int)

    for i in range(1, n + 1):
        p[0] = i
        j0 = 0
        minv = np.full(m + 1, np.inf)
        used = np.zeros(m + 1, dtype=bool)

        while True:
            used[j0] = True
            i0 = p[j0]
            free = ~used[1:]

            reduced = c[i0 - 1] - u[i0] - v[1:]
            improved = free & (reduced < minv[1:])
            minv[1:][improved] = reduced[improved]
            way[1:][improved] = j0

            candidates = np.where(free, minv[1:], np.inf)
            j1 = int(np.argmin(candidates)) + 1
            delta = candidates[j1 - 1]

            used_cols = np.flatnonzero(used)
            u[p[used_cols]] += delta
            v[used_cols] -= delta
            minv[1:][free] -= delta

            j0 = j1
            if p[j0] == 0:
                break

        # Augment along the alternating path.
        while j0 != 0:
            j1 = way[j0]
            p[j0] = p[j1]
            j0 = j1

    res = [-1] * n
    for j in range(1, m + 1):
        if p[j] != 0:
            res[p[j] - 1] = j - 1
    return res
