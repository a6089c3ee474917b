"""Rank matrices and blocking pair search for the one-to-one games."""

import numba as nb
import numpy as np
from scipy import sparse as sp

__all__ = ["rank_matrix", "match_vector", "find_blocking_pairs"]


def rank_matrix(players, others):
  """Build the matrix of original ranks of `others` by `players`.

  The most preferred player has rank 1, the second 2, and so on. Unranked
  players (and players outside `others`) get 0, which is left implicit in the
  sparse matrix. A player ranked twice keeps its first position.

  Args:
    players: list of players whose rankings form the rows.
    others: list of players that index the columns.

  Returns:
    A (len(players), len(others)) `scipy.sparse.csr_matrix` of int32.
  """
  column = {other: j for j, other in enumerate(others)}
  I, J, V = [], [], []
  for i, player in enumerate(players):
    for other, rank in player._ranks.items():
      j = column.get(other)
      if j is not None:
        I.append(i)
        J.append(j)
        V.append(rank + 1)
  return sp.coo_matrix(
      (np.array(V, dtype=np.int32),
       (np.array(I, dtype=np.int64), np.array(J, dtype=np.int64))),
      shape=(len(players), len(others)), dtype=np.int32).tocsr()


def match_vector(players, others):
  """Column index in `others` of each player's match, or -1 if unmatched."""
  column = {other: j for j, other in enumerate(others)}
  return np.array(
      [column.get(p.matching, -1) if p.matching is not None else -1
       for p in players], dtype=np.int64)


@nb.njit(cache=False)
def _blocking_mask(U, V, match, other_match):
  """Mark every (i, j) that blocks the matching.

  Args:
    U: (m, n) ranks of the columns by the rows, 0 for unacceptable.
    V: (n, m) ranks of the rows by the columns, 0 for unacceptable.
    match: (m,) column matched to each row, -1 if unmatched.
    other_match: (n,) row matched to each column, -1 if unmatched.

  Returns:
    An (m, n) boolean array.
  """
  m, n = U.shape
  mask = np.zeros((m, n), dtype=np.bool_)
  for i in range(m):
    own = n + 1
    if match[i] >= 0 and U[i, match[i]] > 0:
      own = U[i, match[i]]
    for j in range(n):
      if match[i] == j or U[i, j] == 0 or U[i, j] >= own:
        continue
      if V[j, i] == 0:
        continue
      theirs = m + 1
      if other_match[j] >= 0 and V[j, other_match[j]] > 0:
        theirs = V[j, other_match[j]]
      if V[j, i] < theirs:
        mask[i, j] = True
  return mask


def find_blocking_pairs(players, others):
  """Find all blocking pairs between two lists of singly matched players.

  A pair blocks when the two find each other acceptable, are not matched to
  each other, and each is either unmatched or prefers the other to their
  current match. Passing the same list twice checks a roommates instance;
  each unordered pair is then reported once.

  Returns:
    A list of `(player, other)` tuples.
  """
  if not players or not others:
    return []
  U = rank_matrix(players, others).toarray()
  V = rank_matrix(others, players).toarray()
  mask = _blocking_mask(
      U, V, match_vector(players, others), match_vector(others, players))
  symmetric = players is others
  return [(players[i], others[j]) for i, j in np.argwhere(mask)
          if not symmetric or i < j]
