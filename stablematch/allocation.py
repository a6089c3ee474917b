"""Hospital-resident and student allocation games.

Both games match a party of single players (residents, students) to
capacitated players (hospitals, projects). In the student allocation game
every project belongs to a supervisor whose own capacity bounds the total
number of students across all of their projects.

Unlike the one-to-one games, problems with the input are not fatal. Each is
recorded as a `Diagnostic` in `game.diagnostics`, and with `clean=True` the
game also repairs it before solving.
"""

import logging

import stablematch.core
from stablematch import exceptions
from stablematch.exceptions import (CAPACITY_CHANGED, PLAYER_EXCLUDED,
                                    PREFERENCES_CHANGED)
from stablematch.games import BaseGame, _copy_players, _resolve
from stablematch.matchings import MultipleMatching
from stablematch.players import Hospital, Player, Project, Supervisor

__all__ = ["HospitalResident", "StudentAllocation"]

logger = logging.getLogger(__name__)


def _check_inconsistent(matching):
  issues = []
  for hospital, residents in (matching or {}).items():
    if list(hospital.matching) != list(residents):
      issues.append(
          "{0} is matched to {1} but the matching says they should be "
          "matched to {2}.".format(hospital, [str(p) for p in hospital.matching],
                                   [str(p) for p in residents]))
    for resident in residents:
      if resident.matching is not hospital:
        issues.append(
            "{0} is matched to {1} but the matching says they should be "
            "matched to {2}.".format(resident, resident.matching, hospital))
  return issues


def _check_unacceptable(players):
  issues = []
  for player in players:
    if isinstance(player, Hospital):
      issues.extend(player.check_if_match_is_unacceptable())
    else:
      issue = player.check_if_match_is_unacceptable(unmatched_okay=True)
      if issue:
        issues.append(issue)
  return issues


def _check_oversubscribed(players):
  issues = []
  for player in players:
    issue = player.check_if_oversubscribed()
    if issue:
      issues.append(issue)
  return issues


class HospitalResident(BaseGame):
  """Solver for the hospital-resident assignment problem (HR).

  Attributes:
    residents: copies of the residents.
    hospitals: copies of the hospitals.
  """
  _optimal_choices = ("resident", "hospital")

  def __init__(self, residents, hospitals, clean=False):
    """
    Args:
      residents: list of `Player`.
      hospitals: list of `Hospital`.
      clean: bool, optional
        If True, repair recoverable problems with the input. Default is False.
    """
    super().__init__(clean=clean)
    self.residents, self.hospitals = _copy_players(residents, hospitals)
    self._check_inputs()

  def __repr__(self):
    return "<HospitalResident with {0} residents and {1} hospitals>".format(
        len(self.residents), len(self.hospitals))

  @classmethod
  def create_from_dictionaries(cls, resident_prefs, hospital_prefs,
                               capacities, clean=False):
    """Create an instance of HR from two preference dictionaries and capacities.

    Args:
      resident_prefs: dictionary from resident name to ranked hospital names.
      hospital_prefs: dictionary from hospital name to ranked resident names.
      capacities: dictionary from hospital name to capacity.
      clean: passed on to the constructor.
    """
    residents = {name: Player(name) for name in resident_prefs}
    hospitals = {name: Hospital(name, capacities[name])
                 for name in hospital_prefs}
    for name, resident in residents.items():
      resident.set_prefs(_resolve(resident_prefs[name], hospitals,
                                  lambda n: Hospital(n, 0)))
    for name, hospital in hospitals.items():
      hospital.set_prefs(_resolve(hospital_prefs[name], residents))
    return cls(list(residents.values()), list(hospitals.values()),
               clean=clean)

  def solve(self, optimal="resident", verbose=False):
    """Solve the instance of HR and return the matching.

    Args:
      optimal: "resident" or "hospital", the party to optimise for.
      verbose: bool, optional
        If True, the matching found is logged at INFO level.

    Returns:
      A `MultipleMatching` from hospitals to lists of residents.
    """
    self._check_optimal(optimal)
    self.matching = MultipleMatching(stablematch.core.hospital_resident(
        self.residents, self.hospitals, optimal=optimal))
    self._log_solution(verbose)
    return self.matching

  def check_validity(self):
    """Check whether the current matching is valid.

    Raises:
      MatchingError: listing every unacceptable match, over-subscribed
        hospital and inconsistent match.
    """
    unacceptable = _check_unacceptable(self.residents + self.hospitals)
    oversubscribed = _check_oversubscribed(self.hospitals)
    inconsistent = _check_inconsistent(self.matching)
    if unacceptable or oversubscribed or inconsistent:
      raise exceptions.MatchingError(
          unacceptable_matches=unacceptable,
          oversubscribed_hospitals=oversubscribed,
          inconsistent_matches=inconsistent)
    return True

  def check_stability(self):
    """Check for the existence of any blocking pairs.

    A resident and a hospital block the matching if they find each other
    acceptable, the resident is unmatched or prefers the hospital to their
    match, and the hospital has space or prefers the resident to one of its
    matches. The pairs are stored in `blocking_pairs`.
    """
    blocking_pairs = []
    for resident in self.residents:
      for hospital in self.hospitals:
        if (_check_mutual_preference(resident, hospital) and
            _check_resident_unhappy(resident, hospital) and
            _check_hospital_unhappy(resident, hospital)):
          blocking_pairs.append((resident, hospital))

    self.blocking_pairs = blocking_pairs
    return not blocking_pairs

  def _check_inputs(self):
    self._check_prefs_unique(self.residents)
    self._check_prefs_unique(self.hospitals)

    self._check_prefs_all_in_party(self.residents, self.hospitals, "hospital")
    self._check_prefs_all_in_party(self.hospitals, self.residents, "resident")

    self._check_prefs_all_reciprocated()
    self._check_reciprocated_all_prefs()

    self._check_prefs_nonempty("residents", "hospitals")
    self._check_prefs_nonempty("hospitals", "residents")

    self._check_capacity("hospitals", "residents")

  def _check_prefs_unique(self, players):
    """Check that no one has ranked another player more than once."""
    for player in players:
      unique = []
      for other in player.prefs:
        if other in unique:
          self._record(PREFERENCES_CHANGED,
                       "{0} has ranked {1} multiple times.".format(player, other))
        else:
          unique.append(other)
      if self.clean and len(unique) < len(player.prefs):
        player.set_prefs(unique)

  def _check_prefs_all_in_party(self, players, others, other_kind):
    """Check that everyone has only ranked members of the other party."""
    for player in players:
      for other in list(player.prefs):
        if other not in others:
          self._record(PREFERENCES_CHANGED,
                       "{0} has ranked a non-{1}: {2}.".format(
                           player, other_kind, other))
          if self.clean:
            self._forget_outsider(player, other)

  def _forget_outsider(self, player, other):
    player._forget(other)

  def _check_prefs_all_reciprocated(self):
    """Check that the hospitals have only ranked residents who ranked them."""
    for hospital in self.hospitals:
      for resident in list(hospital.prefs):
        if hospital not in resident.prefs:
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked {1} but they did not.".format(
                           hospital, resident))
          if self.clean:
            hospital._forget(resident)

  def _check_reciprocated_all_prefs(self):
    """Check that the hospitals have ranked every resident who ranked them."""
    for hospital in self.hospitals:
      for resident in self.residents:
        if hospital in resident.prefs and resident not in hospital.prefs:
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked {1} but they did not.".format(
                           resident, hospital))
          if self.clean:
            resident._forget(hospital)

  def _check_prefs_nonempty(self, party, other_party):
    """Check that everyone has a nonempty preference list."""
    for player in list(getattr(self, party)):
      if not player.prefs:
        self._record(PLAYER_EXCLUDED,
                     "{0} has an empty preference list.".format(player))
        if self.clean:
          self._remove_player(player, party, other_party)

  def _check_capacity(self, party, other_party):
    """Check that everyone in `party` has a capacity of at least one."""
    for player in list(getattr(self, party)):
      if player.capacity < 1:
        self._record(PLAYER_EXCLUDED,
                     "{0} has a capacity of {1}; it must be at least 1.".format(
                         player, player.capacity))
        if self.clean:
          self._remove_player(player, party, other_party)

  def _remove_player(self, player, party, other_party):
    """Remove a player from the game and from everyone's preferences."""
    logger.debug("Removing %s from the game", player)
    setattr(self, party, [p for p in getattr(self, party) if p is not player])
    for other in getattr(self, other_party):
      if player in other.prefs:
        other._forget(player)


def _check_mutual_preference(resident, hospital):
  return resident.is_acceptable(hospital) and hospital.is_acceptable(resident)


def _check_resident_unhappy(resident, hospital):
  return resident.matching is None or resident.prefers(hospital,
                                                       resident.matching)


def _check_hospital_unhappy(resident, hospital):
  if resident in hospital.matching:
    return False
  return len(hospital.matching) < hospital.capacity or any(
      hospital.prefers(resident, match) for match in hospital.matching)


def _check_project_unhappy(project, student):
  """Whether a project (with its supervisor) would take on `student`."""
  if student in project.matching:
    return False
  supervisor = project.supervisor
  project_undersubscribed = len(project.matching) < project.capacity
  supervisor_full = len(supervisor.matching) >= supervisor.capacity

  supervisor_worst = supervisor.get_worst_match()
  swap_available = (
      (student in supervisor.matching and student.matching is not project) or
      (supervisor_worst is not None and
       supervisor.prefers(student, supervisor_worst)))

  project_worst = project.get_worst_match()
  project_upsetting_supervisor = (
      len(project.matching) >= project.capacity and
      project_worst is not None and supervisor.prefers(student, project_worst))

  return ((project_undersubscribed and not supervisor_full) or
          (project_undersubscribed and supervisor_full and swap_available) or
          project_upsetting_supervisor)


class StudentAllocation(HospitalResident):
  """Solver for the student-allocation problem (SA).

  Students rank projects and supervisors rank students. A project's ranking
  is its supervisor's, restricted to the students who ranked the project.

  Attributes:
    students: copies of the students.
    projects: copies of the projects.
    supervisors: copies of the supervisors.
  """
  _optimal_choices = ("student", "supervisor")

  def __init__(self, students, projects, supervisors, clean=False):
    """
    Args:
      students: list of `Player`.
      projects: list of `Project`, each attached to one of `supervisors`.
      supervisors: list of `Supervisor`.
      clean: bool, optional
        If True, repair recoverable problems with the input. Default is False.

    Raises:
      GameInputError: if a project has no supervisor among `supervisors`.
    """
    BaseGame.__init__(self, clean=clean)
    for project in projects:
      if project.supervisor is None or not any(
          project.supervisor is s for s in supervisors):
        raise exceptions.GameInputError(
            "{0} must be supervised by one of the supervisors.".format(project))
    self.students, self.projects, self.supervisors = _copy_players(
        students, projects, supervisors)
    self._check_inputs()

  def __repr__(self):
    return ("<StudentAllocation with {0} students, {1} projects and {2} "
            "supervisors>".format(len(self.students), len(self.projects),
                                  len(self.supervisors)))

  @classmethod
  def create_from_dictionaries(cls, student_prefs, supervisor_prefs,
                               project_supervisors, project_capacities,
                               supervisor_capacities, clean=False):
    """Create an instance of SA from a set of dictionaries.

    Args:
      student_prefs: dictionary from student name to ranked project names.
      supervisor_prefs: dictionary from supervisor name to ranked student
        names.
      project_supervisors: dictionary from project name to supervisor name.
      project_capacities: dictionary from project name to capacity.
      supervisor_capacities: dictionary from supervisor name to capacity.
      clean: passed on to the constructor.
    """
    students = {name: Player(name) for name in student_prefs}
    projects = {name: Project(name, project_capacities[name])
                for name in project_supervisors}
    supervisors = {name: Supervisor(name, capacity)
                   for name, capacity in supervisor_capacities.items()}

    for name, supervisor_name in project_supervisors.items():
      if supervisor_name not in supervisors:
        raise exceptions.GameInputError(
            "{0} is supervised by {1}, who has no capacity.".format(
                name, supervisor_name))
      projects[name].set_supervisor(supervisors[supervisor_name])

    for name, student in students.items():
      student.set_prefs(_resolve(student_prefs[name], projects,
                                 lambda n: Project(n, 0)))
    for name, supervisor in supervisors.items():
      supervisor.set_prefs(_resolve(supervisor_prefs.get(name, []), students))

    return cls(list(students.values()), list(projects.values()),
               list(supervisors.values()), clean=clean)

  def solve(self, optimal="student", verbose=False):
    """Solve the instance of SA and return the matching.

    Args:
      optimal: "student" or "supervisor", the party to optimise for.
      verbose: bool, optional
        If True, the matching found is logged at INFO level.

    Returns:
      A `MultipleMatching` from projects to lists of students.
    """
    self._check_optimal(optimal)
    self.matching = MultipleMatching(stablematch.core.student_allocation(
        self.students, self.projects, self.supervisors, optimal=optimal))
    self._log_solution(verbose)
    return self.matching

  def check_validity(self):
    """Check whether the current matching is valid.

    Raises:
      MatchingError: listing every unacceptable match, over-subscribed
        project or supervisor and inconsistent match.
    """
    unacceptable = _check_unacceptable(
        self.students + self.projects + self.supervisors)
    oversubscribed = _check_oversubscribed(self.projects + self.supervisors)
    inconsistent = _check_inconsistent(self.matching)
    if unacceptable or oversubscribed or inconsistent:
      raise exceptions.MatchingError(
          unacceptable_matches=unacceptable,
          oversubscribed_players=oversubscribed,
          inconsistent_matches=inconsistent)
    return True

  def check_stability(self):
    """Check for the existence of any blocking pairs.

    The pairs are stored in `blocking_pairs` as (student, project).
    """
    blocking_pairs = []
    for student in self.students:
      for project in self.projects:
        if (_check_mutual_preference(student, project) and
            _check_resident_unhappy(student, project) and
            _check_project_unhappy(project, student)):
          blocking_pairs.append((student, project))

    self.blocking_pairs = blocking_pairs
    return not blocking_pairs

  def _check_inputs(self):
    self._check_prefs_unique(self.students)
    self._check_prefs_unique(self.projects)
    self._check_prefs_unique(self.supervisors)

    self._check_prefs_all_in_party(self.students, self.projects, "project")
    self._check_prefs_nonempty("students", "projects")

    self._check_prefs_all_in_party(self.supervisors, self.students, "student")
    self._check_prefs_nonempty("supervisors", "students")

    self._check_prefs_all_reciprocated()
    self._check_reciprocated_all_prefs()
    self._check_prefs_nonempty("projects", "students")

    self._check_supervisor_prefs_all_reciprocated()
    self._check_supervisor_reciprocated_all_prefs()
    self._check_prefs_nonempty("supervisors", "students")

    self._check_capacity("projects", "students")
    self._check_capacity("supervisors", "students")
    self._check_supervisor_capacities_sufficient()
    self._check_supervisor_capacities_necessary()

  def _forget_outsider(self, player, other):
    if isinstance(player, Supervisor):
      for project in player.projects:
        project._forget(other)
    player._forget(other)

  def _check_prefs_all_reciprocated(self):
    """Check that the projects have only ranked students who ranked them."""
    for project in self.projects:
      for student in list(project.prefs):
        if project not in student.prefs:
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked {1} but they did not.".format(
                           project, student))
          if self.clean:
            project._forget(student)

  def _check_reciprocated_all_prefs(self):
    """Check that the projects have ranked every student who ranked them."""
    for project in self.projects:
      for student in self.students:
        if project in student.prefs and student not in project.prefs:
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked {1} but they did not.".format(
                           student, project))
          if self.clean:
            student._forget(project)

  def _check_supervisor_prefs_all_reciprocated(self):
    """Check that supervisors only rank students who ranked their projects."""
    for supervisor in self.supervisors:
      for student in list(supervisor.prefs):
        if not any(p in supervisor.projects for p in student.prefs):
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked {1} but they did not rank any of their "
                       "projects.".format(supervisor, student))
          if self.clean:
            for project in supervisor.projects:
              project._forget(student)
            supervisor._forget(student)

  def _check_supervisor_reciprocated_all_prefs(self):
    """Check that supervisors rank every student who ranked their projects."""
    for supervisor in self.supervisors:
      for student in self.students:
        common = [p for p in student.prefs if p in supervisor.projects]
        if common and student not in supervisor.prefs:
          self._record(PREFERENCES_CHANGED,
                       "{0} ranked a project provided by {1} but they did "
                       "not.".format(student, supervisor))
          if self.clean:
            for project in common:
              stablematch.core.delete_pair(student, project)

  def _check_supervisor_capacities_sufficient(self):
    """Check that each supervisor has space for their largest project."""
    for supervisor in self.supervisors:
      for project in supervisor.projects:
        if project.capacity > supervisor.capacity:
          self._record(CAPACITY_CHANGED,
                       "{0} has a capacity of {1} but its supervisor has a "
                       "capacity of {2}.".format(project, project.capacity,
                                                 supervisor.capacity))
          if self.clean:
            project.capacity = supervisor.capacity

  def _check_supervisor_capacities_necessary(self):
    """Check that no supervisor has more capacity than their projects."""
    for supervisor in self.supervisors:
      total = sum(project.capacity for project in supervisor.projects)
      if supervisor.capacity > total:
        self._record(CAPACITY_CHANGED,
                     "{0} has a capacity of {1} but their projects have a "
                     "capacity of {2}.".format(supervisor, supervisor.capacity,
                                               total))
        if self.clean:
          supervisor.capacity = total

  def _remove_player(self, player, party, other_party):
    """Remove a student, project or supervisor from the game."""
    logger.debug("Removing %s from the game", player)
    if party == "supervisors":
      self.supervisors = [s for s in self.supervisors if s is not player]
      for project in list(player.projects):
        self._remove_player(project, "projects", "students")
    elif party == "projects":
      self.projects = [p for p in self.projects if p is not player]
      if player.supervisor is not None and player in player.supervisor.projects:
        player.supervisor.projects.remove(player)
      for student in self.students:
        if player in student.prefs:
          student._forget(player)
    else:
      self.students = [s for s in self.students if s is not player]
      for project in self.projects:
        project._forget(player)
      for supervisor in self.supervisors:
        supervisor._forget(player)
