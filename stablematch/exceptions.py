"""Errors and diagnostics raised or recorded by the matching games."""

import collections
import logging

__all__ = [
    "MatchingError", "GameInputError", "EmptyPreferenceError", "Diagnostic",
    "NO_STABLE_MATCHING", "PREFERENCES_CHANGED", "CAPACITY_CHANGED",
    "PLAYER_EXCLUDED"
]

logger = logging.getLogger(__name__)

NO_STABLE_MATCHING = "no_stable_matching"
PREFERENCES_CHANGED = "preferences_changed"
CAPACITY_CHANGED = "capacity_changed"
PLAYER_EXCLUDED = "player_excluded"

Diagnostic = collections.namedtuple("Diagnostic", ["kind", "message"])


class MatchingError(Exception):
  """A matching breaks one or more rules of its game.

  Attributes:
    details: dictionary from the name of a broken rule to the list of
      messages describing every violation of that rule.
  """
  def __init__(self, **details):
    self.details = {rule: issues for rule, issues in details.items() if issues}
    super().__init__("; ".join(
        "{0}: {1}".format(rule, issues) for rule, issues in self.details.items()
    ))


class GameInputError(ValueError):
  """The players given to a game cannot form a valid instance."""


class EmptyPreferenceError(IndexError):
  """A player with no remaining preferences was asked for its favourite."""


def record(diagnostics, kind, message):
  """Append a diagnostic to `diagnostics` and log it as a warning."""
  logger.warning("[%s] %s", kind, message)
  if diagnostics is not None:
    diagnostics.append(Diagnostic(kind, message))
