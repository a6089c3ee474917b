"""Unit tests for the matching algorithms"""

import os
import sys
sys.path.insert(0, os.path.abspath('..'))

import unittest

from stablematch import core
from stablematch.exceptions import NO_STABLE_MATCHING
from stablematch.players import Hospital, Player, Project, Supervisor


def make_players(prefs, others=None, capacities=None):
  """Create players from name-keyed preferences.

  Returns the players of `prefs` and, when given, those of `others`, each as a
  dictionary keyed by name.
  """
  def create(names):
    if capacities is not None:
      return {n: Hospital(n, capacities[n]) for n in names}
    return {n: Player(n) for n in names}

  players = {n: Player(n) for n in prefs}
  targets = create(others) if others is not None else players
  for name, ranking in prefs.items():
    players[name].set_prefs([targets[n] for n in ranking])
  if others is not None:
    for name, ranking in others.items():
      targets[name].set_prefs([players[n] for n in ranking])
  return players, targets


def names(result):
  out = {}
  for player, match in result.items():
    if isinstance(match, list):
      out[player.name] = [p.name for p in match]
    else:
      out[player.name] = None if match is None else match.name
  return out


class TestStableMarriage(unittest.TestCase):
  def setUp(self):
    self.suitor_prefs = {"A": ["X", "Y", "Z"], "B": ["Y", "X", "Z"],
                         "C": ["Y", "Z", "X"]}
    self.reviewer_prefs = {"X": ["B", "A", "C"], "Y": ["A", "B", "C"],
                           "Z": ["A", "B", "C"]}

  def solve(self, optimal):
    suitors, reviewers = make_players(self.suitor_prefs, self.reviewer_prefs)
    return core.stable_marriage(list(suitors.values()),
                                list(reviewers.values()), optimal=optimal)

  def test_suitor_optimal(self):
    self.assertDictEqual(names(self.solve("suitor")),
                         {"A": "X", "B": "Y", "C": "Z"})

  def test_reviewer_optimal(self):
    self.assertDictEqual(names(self.solve("reviewer")),
                         {"A": "Y", "B": "X", "C": "Z"})

  def test_both_sides_matched_to_each_other(self):
    for suitor, reviewer in self.solve("suitor").items():
      self.assertIs(reviewer.matching, suitor)


class TestHospitalResident(unittest.TestCase):
  def setUp(self):
    self.resident_prefs = {"A": ["X", "Y"], "B": ["Y", "X"], "C": ["X", "Y"]}
    self.hospital_prefs = {"X": ["A", "C", "B"], "Y": ["B", "A", "C"]}
    self.capacities = {"X": 2, "Y": 1}

  def solve(self, optimal):
    residents, hospitals = make_players(
        self.resident_prefs, self.hospital_prefs, self.capacities)
    return core.hospital_resident(list(residents.values()),
                                  list(hospitals.values()), optimal=optimal)

  def test_resident_optimal(self):
    self.assertDictEqual(names(self.solve("resident")),
                         {"X": ["A", "C"], "Y": ["B"]})

  def test_hospital_optimal(self):
    self.assertDictEqual(names(self.solve("hospital")),
                         {"X": ["A", "C"], "Y": ["B"]})

  def test_eviction_of_worst_match(self):
    self.resident_prefs = {"A": ["X"], "B": ["X"]}
    self.hospital_prefs = {"X": ["A", "B"]}
    self.capacities = {"X": 1}
    self.assertDictEqual(names(self.solve("resident")), {"X": ["A"]})
    self.assertDictEqual(names(self.solve("hospital")), {"X": ["A"]})

  def test_unreciprocated_ranking_is_skipped(self):
    self.resident_prefs = {"A": ["X", "Y"], "B": ["Y"]}
    self.hospital_prefs = {"X": ["B"], "Y": ["A", "B"]}
    self.capacities = {"X": 1, "Y": 1}
    self.assertDictEqual(names(self.solve("resident")),
                         {"X": [], "Y": ["A"]})


class TestStableRoommates(unittest.TestCase):
  def solve(self, prefs, diagnostics=None):
    players, _ = make_players(prefs)
    return core.stable_roommates(list(players.values()),
                                 diagnostics=diagnostics)

  def test_solvable_instance(self):
    prefs = {"A": ["B", "C", "D"], "B": ["A", "C", "D"],
             "C": ["A", "B", "D"], "D": ["A", "B", "C"]}
    self.assertDictEqual(names(self.solve(prefs)),
                         {"A": "B", "B": "A", "C": "D", "D": "C"})

  def test_instance_without_stable_matching(self):
    prefs = {"A": ["B", "C", "D"], "B": ["C", "A", "D"],
             "C": ["A", "B", "D"], "D": ["A", "B", "C"]}
    diagnostics = []
    result = self.solve(prefs, diagnostics)
    self.assertDictEqual(names(result),
                         {"A": None, "B": None, "C": None, "D": None})
    self.assertEqual(len(diagnostics), 2)
    self.assertTrue(all(d.kind == NO_STABLE_MATCHING for d in diagnostics))

  def test_no_sink_for_diagnostics(self):
    prefs = {"A": ["B", "C", "D"], "B": ["C", "A", "D"],
             "C": ["A", "B", "D"], "D": ["A", "B", "C"]}
    with self.assertLogs("stablematch.exceptions", level="WARNING"):
      self.solve(prefs)

  def test_matching_is_symmetric(self):
    prefs = {"A": ["C", "B", "D"], "B": ["D", "A", "C"],
             "C": ["B", "D", "A"], "D": ["C", "A", "B"]}
    result = self.solve(prefs)
    for player, other in result.items():
      if other is not None:
        self.assertIs(result[other], player)

  def test_all_or_nothing_cycle(self):
    prefs = {"A": ["B", "C"], "B": ["C", "A"], "C": ["A", "B"]}
    players, _ = make_players(prefs)
    a, b, c = players["A"], players["B"], players["C"]
    self.assertListEqual(core._locate_all_or_nothing_cycle(a),
                         [(b, c), (c, a), (a, b)])


class TestStudentAllocation(unittest.TestCase):
  def build(self, student_prefs, supervisor_prefs, owners, project_caps,
            supervisor_caps):
    supervisors = {n: Supervisor(n, c) for n, c in supervisor_caps.items()}
    projects = {n: Project(n, project_caps[n]) for n in owners}
    for name, owner in owners.items():
      projects[name].set_supervisor(supervisors[owner])
    students = {n: Player(n) for n in student_prefs}
    for name, ranking in student_prefs.items():
      students[name].set_prefs([projects[n] for n in ranking])
    for name, ranking in supervisor_prefs.items():
      supervisors[name].set_prefs([students[n] for n in ranking])
    return (list(students.values()), list(projects.values()),
            list(supervisors.values()))

  def test_both_directions(self):
    args = ({"a": ["P1", "P2"], "b": ["P1"], "c": ["P2", "P1"]},
            {"S1": ["b", "a", "c"], "S2": ["a", "c"]},
            {"P1": "S1", "P2": "S2"}, {"P1": 1, "P2": 2}, {"S1": 1, "S2": 2})
    for optimal in ("student", "supervisor"):
      result = core.student_allocation(*self.build(*args), optimal=optimal)
      self.assertDictEqual(names(result), {"P1": ["b"], "P2": ["a", "c"]})

  def test_supervisor_capacity_binds(self):
    args = ({"a": ["P"], "b": ["Q"]}, {"S": ["a", "b"]},
            {"P": "S", "Q": "S"}, {"P": 1, "Q": 1}, {"S": 1})
    for optimal in ("student", "supervisor"):
      students, projects, supervisors = self.build(*args)
      result = core.student_allocation(students, projects, supervisors,
                                       optimal=optimal)
      self.assertDictEqual(names(result), {"P": ["a"], "Q": []})
      self.assertEqual([s.name for s in supervisors[0].matching], ["a"])
      self.assertIsNone(students[1].matching)


if __name__ == '__main__':
  unittest.main()
