"""Stable marriage and stable roommates games.

A game copies the players it is given, checks that they form a valid
instance, and solves it with the algorithms in `stablematch.core`. The
callers' players are never modified.

Example:
----------------------------------------------
  >>> from stablematch import StableMarriage
  >>> game = StableMarriage.create_from_dictionaries(
  ...     {"A": ["X", "Y"], "B": ["Y", "X"]},
  ...     {"X": ["B", "A"], "Y": ["A", "B"]})
  >>> game.solve(optimal="suitor").to_dict()
  {'A': 'X', 'B': 'Y'}
----------------------------------------------
"""

import logging

import stablematch.core
from stablematch import exceptions
from stablematch import utils
from stablematch.matchings import SingleMatching
from stablematch.players import Hospital, Player, Project, Supervisor

__all__ = ["BaseGame", "StableMarriage", "StableRoommates"]

logger = logging.getLogger(__name__)


def _blank_copy(player):
  if isinstance(player, Hospital):
    copy = type(player)(player.name, player.capacity)
    copy._original_capacity = player._original_capacity
    return copy
  return type(player)(player.name)


def _copy_players(*parties):
  """Copy each party so that the copies only refer to each other.

  Anyone ranked by a player but missing from every party is copied as well,
  without preferences, so that the input checks can still spot them.

  Returns:
    A list with the copy of each party.
  """
  lookup = {}
  for party in parties:
    for player in party:
      lookup[player] = _blank_copy(player)

  def get(player):
    if player not in lookup:
      lookup[player] = _blank_copy(player)
    return lookup[player]

  originals = list(lookup)
  for player in originals:
    if isinstance(player, Project) and player.supervisor is not None:
      get(player).set_supervisor(get(player.supervisor))

  # Supervisors pass their rankings on to their projects, which needs the
  # students' preferences in place first.
  for player in originals:
    if isinstance(player, Supervisor):
      continue
    if isinstance(player, Project) and player.supervisor is not None:
      continue
    lookup[player].set_prefs([get(p) for p in player.prefs])
  for player in originals:
    if isinstance(player, Supervisor):
      lookup[player].set_prefs([get(p) for p in player.prefs])

  return [[lookup[player] for player in party] for party in parties]


def _resolve(names, lookup, factory=Player):
  """Look up players by name, standing in a bare player for unknown names."""
  return [lookup[name] if name in lookup else factory(name) for name in names]


class BaseGame():
  """Behaviour shared by every game.

  Attributes:
    clean: whether recoverable problems with the input are repaired.
    matching: the matching found by `solve`, or None before solving.
    blocking_pairs: the pairs found by the last `check_stability`, or None.
    diagnostics: list of `Diagnostic` records about the input and the solve.
  """
  _optimal_choices = ()

  def __init__(self, clean=False):
    self.clean = clean
    self.matching = None
    self.blocking_pairs = None
    self.diagnostics = []

  def _record(self, kind, message):
    exceptions.record(self.diagnostics, kind, message)

  def _check_optimal(self, optimal):
    if optimal not in self._optimal_choices:
      raise ValueError("optimal must be one of {0}, got {1!r}.".format(
          list(self._optimal_choices), optimal))

  def _log_solution(self, verbose):
    if verbose:
      logger.info("%r solved: %s", self, self.matching)

  def solve(self, *args, **kwargs):
    raise NotImplementedError

  def check_validity(self):
    raise NotImplementedError

  def check_stability(self):
    raise NotImplementedError


def _check_unmatched(players, unmatched_okay=False):
  issues = []
  for player in players:
    issue = player.check_if_match_is_unacceptable(unmatched_okay)
    if issue:
      issues.append(issue)
  return issues


def _check_inconsistent(matching):
  issues = []
  if matching is None:
    return issues
  for player, other in matching.items():
    if player.matching is not other:
      issues.append(
          "{0} is matched to {1} but the matching says they should be "
          "matched to {2}.".format(player, player.matching, other))
    elif other is not None and other.matching is not player:
      issues.append(
          "{0} is matched to {1} but the matching says they should be "
          "matched to {2}.".format(other, other.matching, player))
  return issues


class StableMarriage(BaseGame):
  """Solver for the stable marriage problem (SM).

  Attributes:
    suitors: copies of the suitors, each ranking every reviewer.
    reviewers: copies of the reviewers, each ranking every suitor.
  """
  _optimal_choices = ("suitor", "reviewer")

  def __init__(self, suitors, reviewers):
    """
    Args:
      suitors: list of `Player`.
      reviewers: list of `Player`.

    Raises:
      GameInputError: if the parties differ in size or anyone has not ranked
        exactly the whole of the other party.
    """
    super().__init__(clean=False)
    self.suitors, self.reviewers = _copy_players(suitors, reviewers)
    self._check_inputs()

  def __repr__(self):
    return "<StableMarriage with {0} suitors and {1} reviewers>".format(
        len(self.suitors), len(self.reviewers))

  @classmethod
  def create_from_dictionaries(cls, suitor_prefs, reviewer_prefs):
    """Create an instance of SM from two preference dictionaries."""
    suitors = {name: Player(name) for name in suitor_prefs}
    reviewers = {name: Player(name) for name in reviewer_prefs}
    for name, suitor in suitors.items():
      suitor.set_prefs(_resolve(suitor_prefs[name], reviewers))
    for name, reviewer in reviewers.items():
      reviewer.set_prefs(_resolve(reviewer_prefs[name], suitors))
    return cls(list(suitors.values()), list(reviewers.values()))

  def solve(self, optimal="suitor", verbose=False):
    """Solve the instance of SM and return the matching.

    Args:
      optimal: "suitor" or "reviewer", the party to optimise for.
      verbose: bool, optional
        If True, the matching found is logged at INFO level.

    Returns:
      A `SingleMatching` from suitors to reviewers.
    """
    self._check_optimal(optimal)
    self.matching = SingleMatching(stablematch.core.stable_marriage(
        self.suitors, self.reviewers, optimal=optimal))
    self._log_solution(verbose)
    return self.matching

  def check_validity(self):
    """Check whether the current matching is valid.

    Raises:
      MatchingError: listing every unmatched player, player missing from the
        matching and inconsistent match.
    """
    players = self.suitors + self.reviewers
    unmatched = _check_unmatched(players)

    seen = set()
    for suitor, reviewer in (self.matching or {}).items():
      seen.add(suitor)
      if reviewer is not None:
        seen.add(reviewer)
    not_in_matching = ["{0} does not appear in matching.".format(p)
                       for p in players if p not in seen]

    inconsistent = _check_inconsistent(self.matching)
    if unmatched or not_in_matching or inconsistent:
      raise exceptions.MatchingError(
          unmatched_players=unmatched,
          players_not_in_matching=not_in_matching,
          inconsistent_matches=inconsistent)
    return True

  def check_stability(self):
    """Check for the existence of any blocking pairs.

    The pairs found are stored in `blocking_pairs` as (suitor, reviewer).
    """
    self.blocking_pairs = utils.find_blocking_pairs(self.suitors,
                                                    self.reviewers)
    return not self.blocking_pairs

  def _check_inputs(self):
    if len(self.suitors) != len(self.reviewers):
      raise exceptions.GameInputError(
          "There must be an equal number of suitors and reviewers.")
    for suitor in self.suitors:
      self._check_player_ranks(suitor, self.reviewers)
    for reviewer in self.reviewers:
      self._check_player_ranks(reviewer, self.suitors)

  @staticmethod
  def _check_player_ranks(player, others):
    """Check that a player has ranked each of `others` exactly once."""
    if len(player.prefs) != len(others) or set(player.prefs) != set(others):
      raise exceptions.GameInputError(
          "Every player must rank each name from the other group. "
          "{0}: {1} != {2}".format(
              player, [str(p) for p in player.prefs],
              [str(p) for p in others]))


class StableRoommates(BaseGame):
  """Solver for the stable roommates problem (SR).

  Not every instance of SR has a stable matching. When none exists, solving
  still succeeds: the players that could not be settled are left unmatched
  and a `no_stable_matching` diagnostic is recorded.

  Attributes:
    players: copies of the players, each ranking every other player.
  """
  def __init__(self, players):
    super().__init__(clean=False)
    self.players, = _copy_players(players)
    self._check_inputs()

  def __repr__(self):
    return "<StableRoommates with {0} players>".format(len(self.players))

  @classmethod
  def create_from_dictionary(cls, player_prefs):
    """Create an instance of SR from a preference dictionary."""
    players = {name: Player(name) for name in player_prefs}
    for name, player in players.items():
      player.set_prefs(_resolve(player_prefs[name], players))
    return cls(list(players.values()))

  def solve(self, verbose=False):
    """Attempt to solve the instance of SR and return the matching."""
    self.matching = SingleMatching(stablematch.core.stable_roommates(
        self.players, diagnostics=self.diagnostics))
    self._log_solution(verbose)
    return self.matching

  def check_validity(self):
    """Check whether the current matching is valid.

    Raises:
      MatchingError: listing every unmatched player and inconsistent match.
    """
    unmatched = _check_unmatched(self.players)
    inconsistent = _check_inconsistent(self.matching)
    if unmatched or inconsistent:
      raise exceptions.MatchingError(
          unmatched_players=unmatched, inconsistent_matches=inconsistent)
    return True

  def check_stability(self):
    """Check for the stability of the current matching.

    Stability in SR requires every player to be matched and no blocking pair
    to exist. The blocking pairs are stored in `blocking_pairs`.
    """
    self.blocking_pairs = utils.find_blocking_pairs(self.players, self.players)
    all_matched = all(p.matching is not None for p in self.players)
    return all_matched and not self.blocking_pairs

  def _check_inputs(self):
    for player in self.players:
      others = [p for p in self.players if p is not player]
      if len(player.prefs) != len(others) or set(player.prefs) != set(others):
        raise exceptions.GameInputError(
            "Every player must rank all other players. {0}: {1} is not a "
            "permutation of {2}".format(
                player, [str(p) for p in player.prefs],
                [str(p) for p in others]))
