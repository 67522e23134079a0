# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Live ordinal set resolution.

A group with ``replicas`` members and a set of delete slots (holes) occupies
the ordinals ``{0, ..., w-1}`` minus the delete slots, where ``w`` is the
smallest width for which ``w - |delete_slots below w| == replicas``. Delete
slots at or beyond ``w`` are redundant and ignored.
"""

from bisect import bisect_left
from typing import AbstractSet, FrozenSet, Iterable, List


def _validate(replicas: int, delete_slots: Iterable[int]) -> List[int]:
    if replicas < 0:
        raise ValueError(f"replicas must be non-negative, got {replicas}")
    slots = sorted(set(delete_slots))
    if slots and slots[0] < 0:
        raise ValueError(f"delete slots must be non-negative, got {slots[0]}")
    return slots


def _live_below(width: int, sorted_slots: List[int]) -> int:
    """Number of live ordinals in [0, width)."""
    return width - bisect_left(sorted_slots, width)


def ordinal_width(replicas: int, delete_slots: AbstractSet[int]) -> int:
    """Return the minimal width w such that [0, w) minus delete_slots has `replicas` members.

    The live count below w never decreases as w grows and increases by at
    most one per step, so the answer lies in [replicas, replicas + len(slots)]
    and can be found by binary search.
    """
    slots = _validate(replicas, delete_slots)
    lo, hi = replicas, replicas + len(slots)
    while lo < hi:
        mid = (lo + hi) // 2
        if _live_below(mid, slots) >= replicas:
            hi = mid
        else:
            lo = mid + 1
    return lo


def resolve_ordinals(replicas: int, delete_slots: AbstractSet[int]) -> FrozenSet[int]:
    """Return the live ordinal set for a group.

    Args:
        replicas: Number of live members
        delete_slots: Ordinals permanently excluded; out-of-range entries are tolerated

    Returns:
        frozenset of exactly `replicas` ordinals
    """
    width = ordinal_width(replicas, delete_slots)
    return frozenset(o for o in range(width) if o not in delete_slots)


def resolve_ordinals_scan(
    replicas: int, delete_slots: AbstractSet[int]
) -> FrozenSet[int]:
    """Reference implementation of resolve_ordinals using a linear width scan."""
    _validate(replicas, delete_slots)
    live = []
    ordinal = 0
    while len(live) < replicas:
        if ordinal not in delete_slots:
            live.append(ordinal)
        ordinal += 1
    return frozenset(live)
