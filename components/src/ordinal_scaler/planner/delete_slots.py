# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Delete-slot annotation codec.

The delete slots of a group are stored on its StatefulSet as a JSON array
under the ``delete-slots`` annotation, e.g. ``{"delete-slots": "[1,2,3]"}``.
Only this module reads or writes that encoding; the planner works on decoded
`GroupState` values.
"""

import json
import logging
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ordinal_scaler.common.exceptions import InvalidDeleteSlotsError
from ordinal_scaler.common.kube import ADVANCED_STATEFULSET_GROUP
from ordinal_scaler.planner.scaler import GroupState

logger = logging.getLogger(__name__)

DELETE_SLOTS_ANNOTATION = "delete-slots"


def parse_delete_slots(value: Optional[str]) -> FrozenSet[int]:
    if value is None or not value.strip():
        return frozenset()
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as e:
        raise InvalidDeleteSlotsError(value, f"not valid JSON ({e})") from e
    if not isinstance(decoded, list):
        raise InvalidDeleteSlotsError(value, "expected a JSON array")
    slots = set()
    for entry in decoded:
        # bool is an int subclass; reject it explicitly
        if isinstance(entry, bool) or not isinstance(entry, int):
            raise InvalidDeleteSlotsError(value, f"entry {entry!r} is not an integer")
        if entry < 0:
            raise InvalidDeleteSlotsError(value, f"entry {entry} is negative")
        slots.add(entry)
    return frozenset(slots)


def format_delete_slots(slots: Iterable[int]) -> str:
    return json.dumps(sorted(set(slots)), separators=(",", ":"))


def _annotations_of(statefulset: Any) -> Dict[str, str]:
    if isinstance(statefulset, dict):
        return (statefulset.get("metadata") or {}).get("annotations") or {}
    return statefulset.metadata.annotations or {}


def _replicas_of(statefulset: Any) -> Optional[int]:
    if isinstance(statefulset, dict):
        return (statefulset.get("spec") or {}).get("replicas")
    return statefulset.spec.replicas


def group_state_from_statefulset(statefulset: Any) -> GroupState:
    """Read the replica count and delete slots from a StatefulSet.

    Accepts a V1StatefulSet or its dict form (as returned by a dynamic
    client or loaded from a manifest).
    """
    annotations = _annotations_of(statefulset)
    replicas = _replicas_of(statefulset)
    if replicas is None:
        # the API server defaults an unset replica count to 1
        replicas = 1
    return GroupState(
        replicas=replicas,
        delete_slots=parse_delete_slots(annotations.get(DELETE_SLOTS_ANNOTATION)),
    )


def build_scale_patch(replicas: int, delete_slots: Iterable[int]) -> Dict[str, Any]:
    """Build a merge patch setting replicas and delete slots on a StatefulSet.

    An empty slot set removes the annotation (a null value deletes the key).
    """
    slots = frozenset(delete_slots)
    annotation = format_delete_slots(slots) if slots else None
    return {
        "metadata": {"annotations": {DELETE_SLOTS_ANNOTATION: annotation}},
        "spec": {"replicas": replicas},
    }


def set_replicas_and_delete_slots(
    statefulset: Any, replicas: int, delete_slots: Iterable[int]
) -> None:
    """Apply replicas and delete slots to a local StatefulSet object in place."""
    slots = frozenset(delete_slots)
    annotations = dict(_annotations_of(statefulset))
    if slots:
        annotations[DELETE_SLOTS_ANNOTATION] = format_delete_slots(slots)
    else:
        annotations.pop(DELETE_SLOTS_ANNOTATION, None)

    if isinstance(statefulset, dict):
        spec = statefulset.get("spec") or {}
        metadata = statefulset.get("metadata") or {}
        spec["replicas"] = replicas
        metadata["annotations"] = annotations
        statefulset["spec"] = spec
        statefulset["metadata"] = metadata
    else:
        statefulset.spec.replicas = replicas
        statefulset.metadata.annotations = annotations


def statefulset_api_version(statefulset: Any) -> Optional[str]:
    if isinstance(statefulset, dict):
        return statefulset.get("apiVersion")
    return getattr(statefulset, "api_version", None)


def supports_delete_slots(statefulset: Any) -> bool:
    """Whether the workload controller honours the delete-slots annotation.

    Only the Advanced StatefulSet does; a native apps/v1 StatefulSet, or an
    object without an apiVersion, does not.
    """
    api_version = statefulset_api_version(statefulset) or ""
    return api_version.split("/", 1)[0] == ADVANCED_STATEFULSET_GROUP
