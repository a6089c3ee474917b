"""Game instance input/output."""

import json

from stablematch.allocation import HospitalResident, StudentAllocation
from stablematch.games import StableMarriage, StableRoommates

__all__ = ["save_json", "load_json"]


def _names(players):
  return [str(p.name) for p in players]


def _pref_dict(players):
  """Map each player's name to the names in their original ranking."""
  return {str(p.name): _names(p._original_prefs or ()) for p in players}


def _capacity_dict(players):
  return {str(p.name): p._original_capacity for p in players}


def save_json(game, filename):
  """Save the preferences and capacities of a game to json format.

  The rankings written are the ones the game was created with, so the saved
  file builds the same instance again. Players that a clean game has removed
  are not saved. Matchings are not saved.

  Args:
    game: a `StableMarriage`, `StableRoommates`, `HospitalResident` or
      `StudentAllocation` object.
    filename: output file name.
  """
  if isinstance(game, StudentAllocation):
    fields = {
        "game": "student_allocation",
        "student_prefs": _pref_dict(game.students),
        "supervisor_prefs": _pref_dict(game.supervisors),
        "project_supervisors": {
            str(p.name): str(p.supervisor.name) for p in game.projects
        },
        "project_capacities": _capacity_dict(game.projects),
        "supervisor_capacities": _capacity_dict(game.supervisors),
        "clean": game.clean
    }
  elif isinstance(game, HospitalResident):
    fields = {
        "game": "hospital_resident",
        "resident_prefs": _pref_dict(game.residents),
        "hospital_prefs": _pref_dict(game.hospitals),
        "capacities": _capacity_dict(game.hospitals),
        "clean": game.clean
    }
  elif isinstance(game, StableMarriage):
    fields = {
        "game": "stable_marriage",
        "suitor_prefs": _pref_dict(game.suitors),
        "reviewer_prefs": _pref_dict(game.reviewers)
    }
  elif isinstance(game, StableRoommates):
    fields = {
        "game": "stable_roommates",
        "player_prefs": _pref_dict(game.players)
    }
  else:
    raise TypeError("Cannot save {0!r} as a game.".format(game))

  with open(filename, mode="w") as g:
    json.dump(fields, g, indent=4)


def load_json(filename):
  """Read a game from a json file written by `save_json`.

  Args:
    filename: input json file name.
  Returns:
    The game object described by the file.
  Raises:
    ValueError: if the file does not name a known game.
  """
  with open(filename) as f:
    all_fields = json.load(f)

  kind = all_fields.get("game")
  if kind == "stable_marriage":
    return StableMarriage.create_from_dictionaries(
        all_fields["suitor_prefs"], all_fields["reviewer_prefs"])
  if kind == "stable_roommates":
    return StableRoommates.create_from_dictionary(all_fields["player_prefs"])
  if kind == "hospital_resident":
    return HospitalResident.create_from_dictionaries(
        all_fields["resident_prefs"], all_fields["hospital_prefs"],
        all_fields["capacities"], clean=all_fields.get("clean", False))
  if kind == "student_allocation":
    return StudentAllocation.create_from_dictionaries(
        all_fields["student_prefs"], all_fields["supervisor_prefs"],
        all_fields["project_supervisors"], all_fields["project_capacities"],
        all_fields["supervisor_capacities"],
        clean=all_fields.get("clean", False))
  raise ValueError("Unknown game {0!r} in {1}.".format(kind, filename))
