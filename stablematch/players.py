"""Players that take part in the matching games.

A `Player` holds at most one match (suitors, reviewers, roommates, residents
and students). A `Hospital` holds up to `capacity` matches, kept in order of
its preference. `Project` and `Supervisor` are hospitals tied to each other
for the student allocation game: every student matched to a project also
counts against the capacity of the project's supervisor.

Every player keeps two rankings. `prefs` is the working list, which the
algorithms shrink by deletion. `_original_prefs` is fixed the first time the
preferences are set, and all comparisons between two candidates use it.
"""

from stablematch.exceptions import EmptyPreferenceError

__all__ = ["Player", "Hospital", "Project", "Supervisor"]


class _BasePlayer():
  """Ranking bookkeeping shared by every kind of player."""
  def __init__(self, name):
    self.name = name
    self.prefs = []
    self._original_prefs = None
    self._ranks = {}

  def __str__(self):
    return str(self.name)

  def __repr__(self):
    return "<{0} {1!r}>".format(type(self).__name__, self.name)

  def set_prefs(self, players):
    """Set the player's preferences to be a list of players.

    The first call also fixes the original ranking, which later calls leave
    untouched.
    """
    self.prefs = list(players)
    if self._original_prefs is None:
      self._original_prefs = tuple(self.prefs)
      self._ranks = {}
      for rank, player in enumerate(self._original_prefs):
        self._ranks.setdefault(player, rank)

  def get_rank(self, other):
    """Position of `other` in the original ranking, or None if unranked."""
    return self._ranks.get(other)

  def is_acceptable(self, other):
    """Whether `other` appears in the original ranking."""
    return other in self._ranks

  def prefers(self, player, other):
    """Whether this player ranks `player` ahead of `other`.

    Unranked players come after every ranked one.
    """
    worst = len(self._ranks)
    return self._ranks.get(player, worst) < self._ranks.get(other, worst)

  def _forget(self, other):
    """Remove `other` from the working preferences (if present)."""
    self.prefs = [p for p in self.prefs if p is not other]

  def unmatched_message(self):
    return "{0} is unmatched.".format(self)

  def not_in_preferences_message(self, other):
    return ("{0} is matched to {1} but they do not appear in their "
            "preference list: {2}.".format(
                self, other, [str(p) for p in self._original_prefs or ()]))


class Player(_BasePlayer):
  """A player that is matched to at most one other player.

  Attributes:
    name: identifier of the player, unique within its party.
    prefs: the working preference list, most preferred first.
    matching: the player's current match, or None.
  """
  def __init__(self, name):
    super().__init__(name)
    self.matching = None

  def _match(self, other):
    self.matching = other

  def _unmatch(self, other=None):
    self.matching = None

  def get_favourite(self):
    """Return the head of the working preference list.

    Raises:
      EmptyPreferenceError: if the player has no preferences left.
    """
    if not self.prefs:
      raise EmptyPreferenceError(
          "{0} has no remaining preferences.".format(self))
    return self.prefs[0]

  def get_successors(self):
    """Return every player ranked below the current match."""
    if self.matching is None:
      return []
    idx = self.prefs.index(self.matching)
    return self.prefs[idx + 1:]

  def check_if_match_is_unacceptable(self, unmatched_okay=False):
    """Return a message if the current match breaks the rules, else None.

    In some games being unmatched does not invalidate the matching; pass
    `unmatched_okay=True` for those.
    """
    other = self.matching
    if other is None:
      return None if unmatched_okay else self.unmatched_message()
    if not self.is_acceptable(other):
      return self.not_in_preferences_message(other)
    return None


class Hospital(_BasePlayer):
  """A player that takes up to `capacity` matches at once.

  Attributes:
    name: identifier of the hospital.
    capacity: maximum number of simultaneous matches.
    prefs: the working preference list, most preferred first.
    matching: current matches, best first according to the original ranking.
  """
  def __init__(self, name, capacity):
    super().__init__(name)
    self.capacity = capacity
    self._original_capacity = capacity
    self.matching = []

  def oversubscribed_message(self):
    return "{0} is matched to {1} which is over their capacity of {2}.".format(
        self, [str(p) for p in self.matching], self.capacity)

  def _sort_matching(self):
    worst = len(self._ranks)
    self.matching.sort(key=lambda p: self._ranks.get(p, worst))

  def _match(self, other):
    """Add `other` to the matches and restore the preference order."""
    self.matching.append(other)
    self._sort_matching()

  def _unmatch(self, other):
    self.matching = [p for p in self.matching if p is not other]

  def _replace_matching(self, players):
    self.matching = list(players)
    self._sort_matching()

  def get_favourite(self):
    """Return the best ranked player not already matched here, or None."""
    for player in self.prefs:
      if player not in self.matching:
        return player
    return None

  def get_worst_match(self):
    """Return the current worst match, or None if there are no matches."""
    if not self.matching:
      return None
    return self.matching[-1]

  def get_successors(self):
    """Return every player ranked below the current worst match."""
    worst = self.get_worst_match()
    if worst is None:
      return []
    idx = self.prefs.index(worst)
    return self.prefs[idx + 1:]

  def check_if_match_is_unacceptable(self):
    """Return a list of messages, one for each unacceptable match."""
    return [self.not_in_preferences_message(other)
            for other in self.matching if not self.is_acceptable(other)]

  def check_if_oversubscribed(self):
    """Return a message if there are more matches than capacity, else False."""
    if len(self.matching) > self.capacity:
      return self.oversubscribed_message()
    return False


class Project(Hospital):
  """A hospital run by a supervisor in the student allocation game.

  Attributes:
    supervisor: the `Supervisor` that owns this project, or None.
  """
  def __init__(self, name, capacity):
    super().__init__(name, capacity)
    self.supervisor = None

  def set_supervisor(self, supervisor):
    """Attach the project to `supervisor` and register it there."""
    self.supervisor = supervisor
    if self not in supervisor.projects:
      supervisor.projects.append(self)

  def _forget(self, student):
    # The supervisor keeps the student while another project still ranks them.
    if student in self.prefs:
      super()._forget(student)
      if self.supervisor is not None:
        self.supervisor._forget(student)

  def _match(self, student):
    super()._match(student)
    if self.supervisor is not None:
      self.supervisor._match(student)

  def _unmatch(self, student):
    super()._unmatch(student)
    if self.supervisor is not None:
      self.supervisor._unmatch(student)

  def _replace_matching(self, students):
    super()._replace_matching(students)
    if self.supervisor is not None:
      self.supervisor._replace_matching(
          [s for project in self.supervisor.projects for s in project.matching])


class Supervisor(Hospital):
  """The owner of one or more projects in the student allocation game.

  A supervisor ranks students directly; those rankings are passed down to each
  of its projects, restricted to the students who ranked that project.

  Attributes:
    projects: the projects run by this supervisor.
  """
  def __init__(self, name, capacity):
    super().__init__(name, capacity)
    self.projects = []

  def set_prefs(self, students):
    super().set_prefs(students)
    for project in self.projects:
      project.set_prefs([s for s in self.prefs if project in s.prefs])

  def _forget(self, student):
    if student in self.prefs and not any(
        student in project.prefs for project in self.projects):
      super()._forget(student)

  def get_favourite(self):
    """Return the favourite viable student and their preferred project.

    A student is viable if they rank one of the supervisor's under-subscribed
    projects that they are not already matched to. The returned project is the
    student's most preferred such project.

    Returns:
      A tuple `(student, project)`, or None if the supervisor is full or no
      viable student remains.
    """
    if len(self.matching) >= self.capacity:
      return None
    for student in self.prefs:
      for project in student.prefs:
        if (project in self.projects and student not in project.matching and
            len(project.matching) < project.capacity):
          return student, project
    return None
