"""Containers for the solutions of the matching games."""

import collections.abc

from stablematch.players import Hospital, Player

__all__ = ["SingleMatching", "MultipleMatching"]


class _BaseMatching(collections.abc.MutableMapping):
  """A fixed-key mapping whose updates are pushed back onto the players.

  Keys can neither be added nor removed after construction. Assigning to an
  existing key re-matches the players involved so that each player's
  `matching` attribute agrees with the container.
  """
  def __init__(self, dictionary=None):
    self._data = dict(dictionary or {})

  def __getitem__(self, key):
    return self._data[key]

  def __setitem__(self, key, value):
    if key not in self._data:
      raise KeyError("{0} is not a key in this matching.".format(key))
    self._check_value(value)
    self._update(key, value)
    self._data[key] = value

  def __delitem__(self, key):
    raise KeyError("Players cannot be removed from a matching.")

  def __iter__(self):
    return iter(self._data)

  def __len__(self):
    return len(self._data)

  def __repr__(self):
    return repr(self.to_dict())

  def __str__(self):
    return str(self.to_dict())

  def keys_by_name(self):
    """Map the name of every key to the key itself."""
    return {key.name: key for key in self._data}


class SingleMatching(_BaseMatching):
  """Matching for games where every player has one partner (SM and SR).

  Values are `Player` instances or None for unmatched players.
  """
  def _check_value(self, value):
    if value is not None and not isinstance(value, Player):
      raise TypeError(
          "{0!r} is not a valid match. Use a Player or None.".format(value))

  def _update(self, key, value):
    previous = key.matching
    if previous is not None and previous is not value and \
        previous.matching is key:
      previous._unmatch()
      if previous in self._data:
        self._data[previous] = None
    if value is not None:
      displaced = value.matching
      if displaced is not None and displaced is not key and \
          displaced.matching is value:
        displaced._unmatch()
        if displaced in self._data:
          self._data[displaced] = None
      value._match(key)
      if value in self._data:
        self._data[value] = key
    key.matching = value

  def to_dict(self):
    """Return the matching as a dictionary of names."""
    return {
        str(key.name): (None if value is None else str(value.name))
        for key, value in self._data.items()
    }


class MultipleMatching(_BaseMatching):
  """Matching for games where one party takes several matches (HR and SA).

  Keys are hospitals (or projects) and values are lists of their matches.
  """
  def _check_value(self, value):
    if not isinstance(value, (list, tuple)) or \
        not all(isinstance(p, Player) for p in value):
      raise TypeError(
          "{0!r} is not a valid match. Use a list of Players.".format(value))

  def _update(self, key, value):
    for player in key.matching:
      if player not in value and player.matching is key:
        player._unmatch()
    for player in value:
      current = player.matching
      if isinstance(current, Hospital) and current is not key:
        current._unmatch(player)
        if current in self._data:
          self._data[current] = current.matching
      player._match(key)
    key._replace_matching(value)

  def __setitem__(self, key, value):
    super().__setitem__(key, value)
    self._data[key] = key.matching

  def to_dict(self):
    """Return the matching as a dictionary of names to lists of names."""
    return {
        str(key.name): [str(p.name) for p in value]
        for key, value in self._data.items()
    }
