"""Deferred acceptance and rotation elimination algorithms.

Each algorithm works directly on the players it is given, shrinking their
working preference lists and setting their matches. Free players are kept on
a stack, so the most recently freed player always proposes next.
"""

import logging

from stablematch import exceptions

__all__ = [
    "stable_marriage", "hospital_resident", "stable_roommates",
    "student_allocation", "delete_pair", "match_pair", "unmatch_pair"
]

logger = logging.getLogger(__name__)


def delete_pair(player, other):
  """Make two players forget each other."""
  player._forget(other)
  other._forget(player)


def match_pair(player, other):
  """Match two players to each other."""
  player._match(other)
  other._match(player)


def unmatch_pair(player, other):
  """Break the match between `player` and `other`."""
  player._unmatch(other)
  other._unmatch(player)


def _drop_if_exhausted(free, player):
  if not player.prefs and player in free:
    free.remove(player)


def stable_marriage(suitors, reviewers, optimal="suitor"):
  """Solve an instance of SM with an extended Gale-Shapley algorithm.

  Once a reviewer accepts a proposal, every suitor they rank lower is deleted
  from their list (and they from the suitor's). Any later proposal to that
  reviewer is therefore an improvement, so it is always accepted.

  Args:
    suitors: list of `Player`. Each must rank every reviewer.
    reviewers: list of `Player`. Each must rank every suitor.
    optimal: "suitor" or "reviewer", the party the matching is optimal for.

  Returns:
    A dictionary from each suitor to their matched reviewer.
  """
  proposers = reviewers if optimal == "reviewer" else suitors
  free = list(proposers)

  while free:
    proposer = free.pop()
    target = proposer.get_favourite()

    current = target.matching
    if current is not None:
      unmatch_pair(current, target)
      free.append(current)

    match_pair(proposer, target)

    for successor in target.get_successors():
      delete_pair(successor, target)

  return {suitor: suitor.matching for suitor in suitors}


def _check_available(hospital):
  """Whether a hospital has space and someone left to propose to."""
  return len(hospital.matching) < hospital.capacity and any(
      p not in hospital.matching for p in hospital.prefs)


def hospital_resident(residents, hospitals, optimal="resident"):
  """Solve an instance of HR using an adapted Gale-Shapley algorithm.

  A stable matching is found that is optimal for the party given by
  `optimal` and, consequently, the worst stable matching for the other party.

  Args:
    residents: list of `Player`.
    hospitals: list of `Hospital`.
    optimal: "resident" or "hospital".

  Returns:
    A dictionary from each hospital to the list of its matched residents.
  """
  if optimal == "hospital":
    _hospital_optimal(hospitals)
  else:
    _resident_optimal(residents)
  return {hospital: hospital.matching for hospital in hospitals}


def _resident_optimal(residents):
  free = list(residents)

  while free:
    resident = free.pop()
    if not resident.prefs:
      continue

    hospital = resident.get_favourite()
    if hospital.capacity < 1 or resident not in hospital.prefs:
      delete_pair(resident, hospital)
      free.append(resident)
      continue

    if len(hospital.matching) >= hospital.capacity:
      worst = hospital.get_worst_match()
      unmatch_pair(worst, hospital)
      free.append(worst)
      logger.debug("%s evicted %s for %s", hospital, worst, resident)

    match_pair(resident, hospital)

    if len(hospital.matching) == hospital.capacity:
      for successor in hospital.get_successors():
        delete_pair(hospital, successor)
        _drop_if_exhausted(free, successor)


def _hospital_optimal(hospitals):
  free = list(hospitals)

  while free:
    hospital = free.pop()
    resident = hospital.get_favourite()
    if resident is None or len(hospital.matching) >= hospital.capacity:
      continue

    if hospital not in resident.prefs:
      delete_pair(hospital, resident)
      if _check_available(hospital):
        free.append(hospital)
      continue

    current = resident.matching
    if current is not None:
      unmatch_pair(resident, current)
      if current not in free:
        free.append(current)

    match_pair(resident, hospital)
    if _check_available(hospital):
      free.append(hospital)

    for successor in resident.get_successors():
      delete_pair(resident, successor)
      if not _check_available(successor) and successor in free:
        free.remove(successor)


def _first_phase(players):
  """Make one-way proposals and forget the pairs that can never be stable.

  A player `p` holding a proposal from `q` records it as `p.matching = q`.
  """
  free = list(players)

  while free:
    player = free.pop()
    if not player.prefs:
      continue

    favourite = player.get_favourite()
    current = favourite.matching
    if current is not None:
      favourite._unmatch()
      free.append(current)

    favourite._match(player)

    for successor in favourite.get_successors():
      delete_pair(successor, favourite)
      _drop_if_exhausted(free, successor)


def _locate_all_or_nothing_cycle(player):
  """Locate a cycle of (least preferable, second choice) pairs.

  Starting from `player`, repeatedly step to the least preferred player of
  the current player's second choice until a player is seen twice.
  """
  lasts = [player]
  seconds = []

  while len(player.prefs) > 1 and player.prefs[1].prefs:
    second_best = player.prefs[1]
    their_worst = second_best.prefs[-1]

    seconds.append(second_best)
    lasts.append(their_worst)

    player = their_worst
    if lasts.count(player) > 1:
      break

  idx = lasts.index(player)
  return list(zip(lasts[idx + 1:], seconds[idx:]))


def _get_pairs_to_delete(cycle):
  """Find the pairs to remove given an all-or-nothing cycle.

  For a cycle (x_1, y_1), ..., (x_n, y_n), each y_i forgets every player
  ranked below x_{i-1}, with subscripts taken modulo n.
  """
  pairs = []
  for i, (_, right) in enumerate(cycle):
    left = cycle[i - 1][0]
    successors = right.prefs[right.prefs.index(left) + 1:]
    for successor in successors:
      pair = (right, successor)
      if pair not in pairs and pair[::-1] not in pairs:
        pairs.append(pair)
  return pairs


def _emptied(players):
  return [p for p in players if not p.prefs]


def _second_phase(players, diagnostics):
  """Locate and remove all-or-nothing cycles until the lists are single."""
  player = next((p for p in players if len(p.prefs) > 1), None)

  while player is not None:
    cycle = _locate_all_or_nothing_cycle(player)
    if not cycle:
      exceptions.record(
          diagnostics, exceptions.NO_STABLE_MATCHING,
          "No rotation could be exposed from {0}.".format(player))
      break

    logger.debug("Eliminating rotation %s",
                 [(str(x), str(y)) for x, y in cycle])
    for pair in _get_pairs_to_delete(cycle):
      delete_pair(*pair)

    empty = _emptied(players)
    if empty:
      exceptions.record(
          diagnostics, exceptions.NO_STABLE_MATCHING,
          "The following players have emptied their preference list: "
          "{0}".format([str(p) for p in empty]))
      break

    player = next((p for p in players if len(p.prefs) > 1), None)


def stable_roommates(players, diagnostics=None):
  """Irving's algorithm for finding a stable solution to SR.

  A stable matching is found if one exists. Otherwise the players whose pairs
  could not be settled are left unmatched (None) and a `no_stable_matching`
  diagnostic is appended to `diagnostics`.

  Args:
    players: list of `Player`. Each must rank every other player.
    diagnostics: optional list that receives `Diagnostic` records.

  Returns:
    A dictionary from each player to their match (or None).
  """
  _first_phase(players)

  empty = _emptied(players)
  if empty:
    exceptions.record(
        diagnostics, exceptions.NO_STABLE_MATCHING,
        "The following players have been rejected by all others, emptying "
        "their preference list: {0}".format([str(p) for p in empty]))

  if any(len(p.prefs) > 1 for p in players):
    _second_phase(players, diagnostics)

  for player in players:
    player._unmatch()
  for player in players:
    if len(player.prefs) == 1:
      other = player.prefs[0]
      if other.prefs == [player]:
        player._match(other)

  return {player: player.matching for player in players}


def student_allocation(students, projects, supervisors, optimal="student"):
  """Solve an instance of SA by treating it as a bi-level HR instance.

  Args:
    students: list of `Player`.
    projects: list of `Project`.
    supervisors: list of `Supervisor`.
    optimal: "student" or "supervisor".

  Returns:
    A dictionary from each project to the list of its matched students.
  """
  if optimal == "supervisor":
    _supervisor_optimal(supervisors)
  else:
    _student_optimal(students)
  return {project: project.matching for project in projects}


def _student_optimal(students):
  free = list(students)

  while free:
    student = free.pop()
    if not student.prefs:
      continue

    project = student.get_favourite()
    supervisor = project.supervisor
    if supervisor is None or project.capacity < 1 or \
        supervisor.capacity < 1 or student not in project.prefs:
      delete_pair(student, project)
      free.append(student)
      continue

    match_pair(student, project)

    if len(project.matching) > project.capacity:
      worst = project.get_worst_match()
      unmatch_pair(worst, project)
      free.append(worst)
      logger.debug("%s evicted %s for %s", project, worst, student)
    elif len(supervisor.matching) > supervisor.capacity:
      # The evicted student may sit on any of the supervisor's projects.
      worst = supervisor.get_worst_match()
      unmatch_pair(worst, worst.matching)
      free.append(worst)
      logger.debug("%s evicted %s for %s", supervisor, worst, student)

    if len(project.matching) == project.capacity:
      for successor in project.get_successors():
        delete_pair(project, successor)
        _drop_if_exhausted(free, successor)

    if len(supervisor.matching) == supervisor.capacity:
      for successor in supervisor.get_successors():
        for other in supervisor.projects:
          if other in successor.prefs:
            delete_pair(other, successor)
        _drop_if_exhausted(free, successor)


def _supervisor_optimal(supervisors):
  free = list(supervisors)

  while free:
    supervisor = free.pop()
    favourite = supervisor.get_favourite()
    if favourite is None:
      continue

    student, project = favourite
    if student.matching is not None:
      unmatch_pair(student, student.matching)

    match_pair(student, project)

    for successor in student.get_successors():
      delete_pair(student, successor)

    free = [s for s in supervisors if s.get_favourite() is not None]
