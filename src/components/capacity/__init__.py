"""
Capacity component - Max active assets per project.
"""

from .component import (
    DEFAULT_MAX_ASSETS_PER_PROJECT,
    run,
    run_check_capacity,
    run_check_reassign,
)
from .models import CapacityCheckInput, CapacityOutput, ReassignCheckInput
from .ports import CapacityRulesPort, ProjectCounterPort

__all__ = [
    "run",
    "run_check_capacity",
    "run_check_reassign",
    "DEFAULT_MAX_ASSETS_PER_PROJECT",
    "CapacityCheckInput",
    "ReassignCheckInput",
    "CapacityOutput",
    "CapacityRulesPort",
    "ProjectCounterPort",
]
