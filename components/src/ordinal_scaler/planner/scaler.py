# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Single-step scaling planner for ordinally identified member groups.

`scale_one` compares the live ordinal sets of the observed and desired group
states and returns exactly one atomic change:

- missing ordinals are added first, lowest ordinal first;
- only when nothing is missing are extra ordinals removed, highest first.

Callers apply the step, re-observe the group, and call again until the
returned direction is NONE. A multi-step plan is never cached, which keeps
the loop safe to resume after a partial failure or a restart.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, FrozenSet, List, Optional

from ordinal_scaler.planner.ordinals import resolve_ordinals

logger = logging.getLogger(__name__)


class ScaleDirection(str, Enum):
    GROW = "grow"
    SHRINK = "shrink"
    NONE = "none"

    @property
    def delta(self) -> int:
        if self is ScaleDirection.GROW:
            return 1
        if self is ScaleDirection.SHRINK:
            return -1
        return 0


@dataclass(frozen=True)
class GroupState:
    """Replica count plus delete slots of one member group."""

    replicas: int
    delete_slots: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.replicas < 0:
            raise ValueError(f"replicas must be non-negative, got {self.replicas}")
        slots = frozenset(self.delete_slots)
        if any(s < 0 for s in slots):
            raise ValueError(f"delete slots must be non-negative, got {sorted(slots)}")
        object.__setattr__(self, "delete_slots", slots)

    def live_ordinals(self) -> FrozenSet[int]:
        return resolve_ordinals(self.replicas, self.delete_slots)


@dataclass(frozen=True)
class ScaleStep:
    """One atomic change toward the desired state.

    `replicas` and `delete_slots` describe the group after the step; `ordinal`
    is -1 iff `direction` is NONE.
    """

    direction: ScaleDirection
    ordinal: int
    replicas: int
    delete_slots: FrozenSet[int]

    @property
    def is_noop(self) -> bool:
        return self.direction is ScaleDirection.NONE

    def apply_to(self, state: GroupState) -> GroupState:
        """Return the group state that results from applying this step."""
        if self.is_noop:
            return state
        return GroupState(replicas=self.replicas, delete_slots=self.delete_slots)


def _resulting_delete_slots(
    actual: GroupState, desired: GroupState, live_after: AbstractSet[int]
) -> FrozenSet[int]:
    # Holes below the new width must be exactly the non-live ordinals there.
    # The desired slots cover every gap the target wants and the actual slots
    # cover every gap still left over; entries past the new width are kept only
    # when the target records them.
    width_after = max(live_after) + 1 if live_after else 0
    kept_actual = {s for s in actual.delete_slots if s < width_after}
    return frozenset((desired.delete_slots | kept_actual) - live_after)


def scale_one(actual: GroupState, desired: GroupState) -> ScaleStep:
    """Compute the next single-ordinal step from `actual` toward `desired`.

    Args:
        actual: Observed group state
        desired: Target group state

    Returns:
        ScaleStep describing one GROW, one SHRINK, or NONE when the live
        ordinal sets already match
    """
    current = actual.live_ordinals()
    target = desired.live_ordinals()
    missing = target - current
    extra = current - target

    if missing:
        # Growth always goes first so a hole moving from one ordinal to
        # another passes through a superset of the required members.
        ordinal = min(missing)
        live_after = current | {ordinal}
        step = ScaleStep(
            direction=ScaleDirection.GROW,
            ordinal=ordinal,
            replicas=actual.replicas + 1,
            delete_slots=_resulting_delete_slots(actual, desired, live_after),
        )
    elif extra:
        ordinal = max(extra)
        live_after = current - {ordinal}
        step = ScaleStep(
            direction=ScaleDirection.SHRINK,
            ordinal=ordinal,
            replicas=actual.replicas - 1,
            delete_slots=_resulting_delete_slots(actual, desired, live_after),
        )
    else:
        return ScaleStep(
            direction=ScaleDirection.NONE,
            ordinal=-1,
            replicas=actual.replicas,
            delete_slots=actual.delete_slots,
        )

    logger.debug(
        f"scale_one: {step.direction.value} ordinal {step.ordinal}, "
        f"replicas {actual.replicas} -> {step.replicas}, "
        f"delete slots {sorted(actual.delete_slots)} -> {sorted(step.delete_slots)}"
    )
    return step


def plan_scaling(
    actual: GroupState, desired: GroupState, max_steps: Optional[int] = None
) -> List[ScaleStep]:
    """Simulate the scale_one fixpoint iteration without touching any group.

    Intended for dry runs and diagnostics. The returned list excludes the
    final NONE step; it is empty when `actual` already matches `desired`.
    """
    steps = []
    state = actual
    while max_steps is None or len(steps) < max_steps:
        step = scale_one(state, desired)
        if step.is_noop:
            break
        steps.append(step)
        state = step.apply_to(state)
    return steps
