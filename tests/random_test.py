"""Tests on randomly generated games"""

import os
import sys
sys.path.insert(0, os.path.abspath('..'))

import unittest

import stablematch


def rank_of_match(player):
  """Original rank of a player's match, with unmatched ranked last."""
  if player.matching is None:
    return len(player._original_prefs)
  return player.get_rank(player.matching)


class TestRandomMarriage(unittest.TestCase):
  def test_stable_and_optimal(self):
    for seed in range(5):
      suitor_game = stablematch.gen_random_marriage(8, seed=seed)
      reviewer_game = stablematch.gen_random_marriage(8, seed=seed)
      suitor_game.solve(optimal="suitor")
      reviewer_game.solve(optimal="reviewer")
      for game in (suitor_game, reviewer_game):
        self.assertTrue(game.check_validity())
        self.assertTrue(game.check_stability())

      for mine, theirs in zip(suitor_game.suitors, reviewer_game.suitors):
        self.assertEqual(mine.name, theirs.name)
        self.assertLessEqual(rank_of_match(mine), rank_of_match(theirs))
      for mine, theirs in zip(reviewer_game.reviewers, suitor_game.reviewers):
        self.assertLessEqual(rank_of_match(mine), rank_of_match(theirs))

  def test_same_seed_same_matching(self):
    first = stablematch.gen_random_marriage(10, seed=42).solve()
    second = stablematch.gen_random_marriage(10, seed=42).solve()
    self.assertDictEqual(first.to_dict(), second.to_dict())


class TestRandomRoommates(unittest.TestCase):
  def test_matching_is_symmetric(self):
    for seed in range(10):
      game = stablematch.gen_random_roommates(8, seed=seed)
      matching = game.solve()
      for player, other in matching.items():
        if other is not None:
          self.assertIs(other.matching, player)
      if not game.diagnostics:
        self.assertTrue(game.check_validity())
        self.assertTrue(game.check_stability())


class TestRandomHospitalResident(unittest.TestCase):
  def test_generated_instance(self):
    game = stablematch.gen_random_hospital_resident(
        20, 5, resident_pref_len=3, num_additional_seat=4, seed=0)
    self.assertEqual(len(game.residents), 20)
    self.assertTrue(all(len(r.prefs) == 3 for r in game.residents))
    self.assertTrue(all(h.capacity >= 1 for h in game.hospitals))
    self.assertLessEqual(sum(h.capacity for h in game.hospitals), 24)

  def test_stable_and_optimal(self):
    for seed in range(5):
      resident_game = stablematch.gen_random_hospital_resident(
          20, 4, resident_pref_len=2, seed=seed)
      hospital_game = stablematch.gen_random_hospital_resident(
          20, 4, resident_pref_len=2, seed=seed)
      resident_game.solve(optimal="resident")
      hospital_game.solve(optimal="hospital")
      for game in (resident_game, hospital_game):
        self.assertTrue(game.check_validity())
        self.assertTrue(game.check_stability())
        for hospital in game.hospitals:
          self.assertLessEqual(len(hospital.matching), hospital.capacity)

      for mine, theirs in zip(resident_game.residents,
                              hospital_game.residents):
        self.assertLessEqual(rank_of_match(mine), rank_of_match(theirs))


class TestRandomStudentAllocation(unittest.TestCase):
  def test_student_optimal_is_stable(self):
    for seed in range(5):
      game = stablematch.gen_random_student_allocation(
          20, 6, 3, student_pref_len=3, seed=seed)
      game.solve(optimal="student")
      self.assertTrue(game.check_validity())
      self.assertTrue(game.check_stability())

  def test_within_capacity(self):
    for seed in range(5):
      for optimal in ("student", "supervisor"):
        game = stablematch.gen_random_student_allocation(
            20, 6, 3, student_pref_len=3, seed=seed)
        game.solve(optimal=optimal)
        self.assertTrue(game.check_validity())
        for player in game.projects + game.supervisors:
          self.assertLessEqual(len(player.matching), player.capacity)

  def test_same_seed_same_matching(self):
    first = stablematch.gen_random_student_allocation(15, 5, 2, seed=3)
    second = stablematch.gen_random_student_allocation(15, 5, 2, seed=3)
    self.assertDictEqual(first.solve().to_dict(), second.solve().to_dict())


if __name__ == '__main__':
  unittest.main()
