"""Random Instance Generators"""

import numpy as np

from stablematch.allocation import HospitalResident, StudentAllocation
from stablematch.games import StableMarriage, StableRoommates

__all__ = [
    "gen_random_marriage", "gen_random_roommates",
    "gen_random_hospital_resident", "gen_random_student_allocation"
]


def _random_rankings(rng, num_rankers, names):
  """Rank `names` uniformly at random, once for each ranker."""
  orders = np.argsort(rng.rand(num_rankers, len(names)), axis=1)
  return [[names[j] for j in order] for order in orders]


def _spread_seats(rng, num_owners, num_seats):
  """Give each owner one seat, then assign the remaining seats at random."""
  seats = rng.randint(num_owners, size=max(num_seats - num_owners, 0))
  return [int(np.sum(seats == k) + 1) for k in range(num_owners)]


def gen_random_marriage(num_players, seed=None):
  """Generate a stable marriage instance with uniform random preferences.

  Suitors are named "s0", "s1", ... and reviewers "r0", "r1", ...

  Args:
    num_players: int
      Number of suitors (and of reviewers).
    seed: int, optional
      Seed for the random number generator.

  Returns:
    A `StableMarriage` object.
  """
  rng = np.random.RandomState(seed)
  suitors = ["s{0}".format(i) for i in range(num_players)]
  reviewers = ["r{0}".format(i) for i in range(num_players)]
  suitor_prefs = dict(zip(suitors,
                          _random_rankings(rng, num_players, reviewers)))
  reviewer_prefs = dict(zip(reviewers,
                            _random_rankings(rng, num_players, suitors)))
  return StableMarriage.create_from_dictionaries(suitor_prefs, reviewer_prefs)


def gen_random_roommates(num_players, seed=None):
  """Generate a stable roommates instance with uniform random preferences.

  Args:
    num_players: int
      Number of players, named "p0", "p1", ...
    seed: int, optional
      Seed for the random number generator.

  Returns:
    A `StableRoommates` object.
  """
  rng = np.random.RandomState(seed)
  names = ["p{0}".format(i) for i in range(num_players)]
  player_prefs = {}
  for name in names:
    others = [other for other in names if other != name]
    player_prefs[name] = _random_rankings(rng, 1, others)[0]
  return StableRoommates.create_from_dictionary(player_prefs)


def gen_random_hospital_resident(num_residents, num_hospitals,
                                 resident_pref_len=0, num_additional_seat=0,
                                 seed=None):
  """Generate a hospital-resident instance.

  Each resident ranks a random subset of hospitals. Each hospital ranks, in
  random order, exactly the residents that ranked it.

  Args:
    num_residents: int
      Number of residents, named "r0", "r1", ...
    num_hospitals: int
      Number of hospitals, named "h0", "h1", ...
    resident_pref_len: int, optional
      Length of each resident's preference list. Default: rank every hospital.
    num_additional_seat: int, optional
      Total seats will be the number of residents plus num_additional_seat,
      provided every hospital has at least one seat. Default is 0.
    seed: int, optional
      Seed for the random number generator.

  Returns:
    A `HospitalResident` object.
  """
  rng = np.random.RandomState(seed)
  residents = ["r{0}".format(i) for i in range(num_residents)]
  hospitals = ["h{0}".format(i) for i in range(num_hospitals)]

  resident_prefs = dict(zip(residents,
                            _random_rankings(rng, num_residents, hospitals)))
  if resident_pref_len:
    for name in residents:
      resident_prefs[name] = resident_prefs[name][:resident_pref_len]

  hospital_prefs = {}
  for hospital in hospitals:
    applicants = [r for r in residents if hospital in resident_prefs[r]]
    hospital_prefs[hospital] = _random_rankings(rng, 1, applicants)[0] \
        if applicants else []

  capacities = dict(zip(hospitals, _spread_seats(
      rng, num_hospitals, num_residents + num_additional_seat)))
  return HospitalResident.create_from_dictionaries(
      resident_prefs, hospital_prefs, capacities, clean=True)


def gen_random_student_allocation(num_students, num_projects, num_supervisors,
                                  student_pref_len=0, seed=None):
  """Generate a student allocation instance.

  Projects are dealt out to supervisors in turn, so each supervisor runs at
  least one project provided `num_projects >= num_supervisors`. A supervisor's
  capacity lies between their largest project capacity and the total capacity
  of their projects.

  Args:
    num_students: int
      Number of students, named "st0", "st1", ...
    num_projects: int
      Number of projects, named "p0", "p1", ...
    num_supervisors: int
      Number of supervisors, named "sv0", "sv1", ...
    student_pref_len: int, optional
      Length of each student's preference list. Default: rank every project.
    seed: int, optional
      Seed for the random number generator.

  Returns:
    A `StudentAllocation` object.
  """
  rng = np.random.RandomState(seed)
  students = ["st{0}".format(i) for i in range(num_students)]
  projects = ["p{0}".format(i) for i in range(num_projects)]
  supervisors = ["sv{0}".format(i) for i in range(num_supervisors)]

  student_prefs = dict(zip(students,
                           _random_rankings(rng, num_students, projects)))
  if student_pref_len:
    for name in students:
      student_prefs[name] = student_prefs[name][:student_pref_len]

  project_supervisors = {
      project: supervisors[k % num_supervisors]
      for k, project in enumerate(projects)
  }
  project_capacities = dict(zip(projects, _spread_seats(
      rng, num_projects, num_students)))

  supervisor_prefs, supervisor_capacities = {}, {}
  for supervisor in supervisors:
    owned = [p for p, s in project_supervisors.items() if s == supervisor]
    applicants = [st for st in students
                  if any(p in student_prefs[st] for p in owned)]
    supervisor_prefs[supervisor] = _random_rankings(rng, 1, applicants)[0] \
        if applicants else []
    capacities = [project_capacities[p] for p in owned] or [1]
    supervisor_capacities[supervisor] = int(
        rng.randint(max(capacities), sum(capacities) + 1))

  return StudentAllocation.create_from_dictionaries(
      student_prefs, supervisor_prefs, project_supervisors,
      project_capacities, supervisor_capacities, clean=True)
