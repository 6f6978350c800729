"""
Capacity component - Per-project asset cap.

A project is not a stored entity; it is the set of active assets sharing a
project_id. The count is therefore always aggregated live from the store and
must be taken inside the same transaction as the write it guards.

Invariants:
- I1: A project holds at most max_assets active assets after a create
- I2: A move is refused when the target already holds max_assets or more
- I3: Assets without a project are never capacity-checked
"""

from __future__ import annotations

from src.core.errors import AssetError, ErrorKind

from .models import CapacityCheckInput, CapacityOutput, ReassignCheckInput
from .ports import CapacityRulesPort, ProjectCounterPort

DEFAULT_MAX_ASSETS_PER_PROJECT = 5


def _get_limit(rules: CapacityRulesPort | None) -> int:
    if rules is None:
        return DEFAULT_MAX_ASSETS_PER_PROJECT
    return rules.get_max_assets_per_project()


def run_check_capacity(
    inp: CapacityCheckInput,
    *,
    counter: ProjectCounterPort,
    rules: CapacityRulesPort | None = None,
) -> CapacityOutput:
    """
    Check that `incoming_count` new assets fit into the project.

    Fails when current + incoming exceeds the limit.
    """
    limit = _get_limit(rules)

    if inp.project_id is None:
        return CapacityOutput(project_id=None, current_count=0, limit=limit)

    current = counter.count_active_in_project(inp.project_id)
    if current + inp.incoming_count > limit:
        return CapacityOutput(
            project_id=inp.project_id,
            current_count=current,
            limit=limit,
            errors=[
                AssetError(
                    code=ErrorKind.CAPACITY_EXCEEDED,
                    message=(
                        f"Cannot add {inp.incoming_count} more images. Project "
                        f"{inp.project_id} already has {current} images. "
                        f"Maximum allowed is {limit}."
                    ),
                    field="project_id",
                )
            ],
            success=False,
        )

    return CapacityOutput(project_id=inp.project_id, current_count=current, limit=limit)


def run_check_reassign(
    inp: ReassignCheckInput,
    *,
    counter: ProjectCounterPort,
    rules: CapacityRulesPort | None = None,
) -> CapacityOutput:
    """
    Check a single asset moving into another project.

    Only the target's current count is compared with the limit (not count + 1),
    and staying in the same project is never checked.
    """
    limit = _get_limit(rules)
    target = inp.target_project_id

    if target is None or target == inp.current_project_id:
        return CapacityOutput(project_id=target, current_count=0, limit=limit)

    current = counter.count_active_in_project(target)
    if current >= limit:
        return CapacityOutput(
            project_id=target,
            current_count=current,
            limit=limit,
            errors=[
                AssetError(
                    code=ErrorKind.CAPACITY_EXCEEDED,
                    message=f"Project {target} already has the maximum of {limit} images",
                    field="project_id",
                )
            ],
            success=False,
        )

    return CapacityOutput(project_id=target, current_count=current, limit=limit)


def run(
    inp: CapacityCheckInput | ReassignCheckInput,
    *,
    counter: ProjectCounterPort,
    rules: CapacityRulesPort | None = None,
) -> CapacityOutput:
    """Main entry point; dispatches on input type."""
    if isinstance(inp, CapacityCheckInput):
        return run_check_capacity(inp, counter=counter, rules=rules)

    elif isinstance(inp, ReassignCheckInput):
        return run_check_reassign(inp, counter=counter, rules=rules)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
