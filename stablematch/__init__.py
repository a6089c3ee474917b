"""
Stablematch
=============================================
Solving stable matching games: stable marriage, hospital-resident, stable
roommates and student allocation.

Example:

Suppose that three residents (A, B, C) apply to two hospitals (X, Y). Each
resident ranks the hospitals they would accept, from the most preferable to
the least preferable:
---------------------------------------------
  >>> resident_prefs = {"A": ["X", "Y"], "B": ["Y"], "C": ["X"]}
---------------------------------------------
Each hospital ranks the residents who applied to it, and has a capacity:
---------------------------------------------
  >>> hospital_prefs = {"X": ["C", "A"], "Y": ["A", "B"]}
  >>> capacities = {"X": 2, "Y": 1}
---------------------------------------------
Construct the game and solve for the resident-optimal stable matching
----------------------------------------------
  >>> import stablematch
  >>> game = stablematch.HospitalResident.create_from_dictionaries(
  ...     resident_prefs, hospital_prefs, capacities)
  >>> matching = game.solve(optimal="resident")
  >>> matching.to_dict()
  {'X': ['C', 'A'], 'Y': ['B']}
  >>> game.check_validity(), game.check_stability()
  (True, True)
----------------------------------------------
Problems with the input of a hospital-resident or student allocation game are
recorded in `game.diagnostics`. Pass `clean=True` to have them repaired before
solving. Stable roommates games without a stable matching leave the unsettled
players unmatched and record a `no_stable_matching` diagnostic instead.
"""

import logging

from stablematch.exceptions import *
from stablematch.players import *
from stablematch.matchings import *
from stablematch.games import *
from stablematch.allocation import *
from stablematch.io import *
from stablematch.random import *

logging.getLogger(__name__).addHandler(logging.NullHandler())
