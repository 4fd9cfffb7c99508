"""
The models package contains all the models used on the server.

.. autoclasstree:: cycleserver.models
"""

from .booth import Booth
from .cycle import Cycle
from .unit import Unit
from .util import UnitStatus, CycleStatus
