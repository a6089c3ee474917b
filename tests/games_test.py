"""Unit tests for the stable marriage and stable roommates games"""

import os
import sys
sys.path.insert(0, os.path.abspath('..'))

import unittest

import stablematch
from stablematch.exceptions import (GameInputError, MatchingError,
                                    NO_STABLE_MATCHING)
from stablematch.players import Player


def pair_names(pairs):
  return sorted((p.name, q.name) for p, q in pairs)


class TestStableMarriage(unittest.TestCase):
  def setUp(self):
    self.suitor_prefs = {"A": ["X", "Y", "Z"], "B": ["Y", "X", "Z"],
                         "C": ["Y", "Z", "X"]}
    self.reviewer_prefs = {"X": ["B", "A", "C"], "Y": ["A", "B", "C"],
                           "Z": ["A", "B", "C"]}
    self.game = stablematch.StableMarriage.create_from_dictionaries(
        self.suitor_prefs, self.reviewer_prefs)

  def test_solve_suitor_optimal(self):
    matching = self.game.solve(optimal="suitor")
    self.assertDictEqual(matching.to_dict(), {"A": "X", "B": "Y", "C": "Z"})
    self.assertTrue(self.game.check_validity())
    self.assertTrue(self.game.check_stability())
    self.assertListEqual(self.game.blocking_pairs, [])

  def test_solve_reviewer_optimal(self):
    matching = self.game.solve(optimal="reviewer")
    self.assertDictEqual(matching.to_dict(), {"A": "Y", "B": "X", "C": "Z"})
    self.assertTrue(self.game.check_stability())

  def test_solving_twice_gives_same_result(self):
    other = stablematch.StableMarriage.create_from_dictionaries(
        self.suitor_prefs, self.reviewer_prefs)
    self.assertDictEqual(self.game.solve().to_dict(), other.solve().to_dict())

  def test_invalid_optimal(self):
    with self.assertRaises(ValueError):
      self.game.solve(optimal="hospital")

  def test_verbose_logs_solution(self):
    with self.assertLogs("stablematch.games", level="INFO") as cm:
      self.game.solve(verbose=True)
    self.assertIn("StableMarriage", cm.output[0])

  def test_caller_players_untouched(self):
    a, b = Player("A"), Player("B")
    x, y = Player("X"), Player("Y")
    a.set_prefs([x, y])
    b.set_prefs([y, x])
    x.set_prefs([b, a])
    y.set_prefs([a, b])
    game = stablematch.StableMarriage([a, b], [x, y])
    game.solve()
    self.assertListEqual(a.prefs, [x, y])
    self.assertListEqual(x.prefs, [b, a])
    self.assertIsNone(a.matching)
    self.assertIsNone(x.matching)
    self.assertIsNot(game.suitors[0], a)

  def test_edited_matching_is_checked(self):
    game = stablematch.StableMarriage.create_from_dictionaries(
        {"A": ["X", "Y"], "B": ["Y", "X"]},
        {"X": ["B", "A"], "Y": ["A", "B"]})
    matching = game.solve()
    self.assertDictEqual(matching.to_dict(), {"A": "X", "B": "Y"})

    a, b = game.suitors
    x, y = game.reviewers
    matching[a] = y
    self.assertFalse(game.check_stability())
    self.assertListEqual(pair_names(game.blocking_pairs),
                         [("A", "X"), ("B", "X")])

    with self.assertRaises(MatchingError) as cm:
      game.check_validity()
    self.assertSetEqual(set(cm.exception.details),
                        {"unmatched_players", "players_not_in_matching"})
    self.assertListEqual(cm.exception.details["unmatched_players"],
                         ["B is unmatched.", "X is unmatched."])

  def test_unequal_parties(self):
    with self.assertRaises(GameInputError):
      stablematch.StableMarriage.create_from_dictionaries(
          {"A": ["X"], "B": ["X"]}, {"X": ["A", "B"]})

  def test_incomplete_ranking(self):
    with self.assertRaises(GameInputError):
      stablematch.StableMarriage.create_from_dictionaries(
          {"A": ["X", "Y"], "B": ["Y"]},
          {"X": ["A", "B"], "Y": ["B", "A"]})
    with self.assertRaises(ValueError):
      stablematch.StableMarriage.create_from_dictionaries(
          {"A": ["X", "Z"], "B": ["Y", "X"]},
          {"X": ["A", "B"], "Y": ["B", "A"]})


class TestStableRoommates(unittest.TestCase):
  def test_solvable_instance(self):
    game = stablematch.StableRoommates.create_from_dictionary(
        {"A": ["B", "C", "D"], "B": ["A", "C", "D"],
         "C": ["A", "B", "D"], "D": ["A", "B", "C"]})
    matching = game.solve()
    self.assertDictEqual(matching.to_dict(),
                         {"A": "B", "B": "A", "C": "D", "D": "C"})
    self.assertTrue(game.check_validity())
    self.assertTrue(game.check_stability())
    self.assertListEqual(game.diagnostics, [])

  def test_instance_without_stable_matching(self):
    game = stablematch.StableRoommates.create_from_dictionary(
        {"A": ["B", "C", "D"], "B": ["C", "A", "D"],
         "C": ["A", "B", "D"], "D": ["A", "B", "C"]})
    matching = game.solve()
    self.assertDictEqual(matching.to_dict(),
                         {"A": None, "B": None, "C": None, "D": None})
    self.assertTrue(game.diagnostics)
    self.assertEqual(game.diagnostics[0].kind, NO_STABLE_MATCHING)
    self.assertFalse(game.check_stability())
    with self.assertRaises(MatchingError) as cm:
      game.check_validity()
    self.assertEqual(len(cm.exception.details["unmatched_players"]), 4)

  def test_blocking_pairs_reported_once(self):
    game = stablematch.StableRoommates.create_from_dictionary(
        {"A": ["B", "C", "D"], "B": ["A", "C", "D"],
         "C": ["A", "B", "D"], "D": ["A", "B", "C"]})
    matching = game.solve()
    a, b, c, d = game.players
    matching[a] = c
    matching[b] = d
    self.assertFalse(game.check_stability())
    self.assertListEqual(pair_names(game.blocking_pairs), [("A", "B")])

  def test_ranking_must_cover_everyone_else(self):
    with self.assertRaises(GameInputError):
      stablematch.StableRoommates.create_from_dictionary(
          {"A": ["B", "C"], "B": ["A"], "C": ["A", "B"]})
    with self.assertRaises(GameInputError):
      stablematch.StableRoommates.create_from_dictionary(
          {"A": ["A", "B"], "B": ["A", "C"], "C": ["A", "B"]})


if __name__ == '__main__':
  unittest.main()
