# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Storage claim naming and access.

The claim name of a member is a wire-level contract shared with whatever
provisioned the storage (the StatefulSet volumeClaimTemplate): changing it
breaks lookup for every claim created under the old scheme.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from ordinal_scaler.common.kube import KubernetesAPI

logger = logging.getLogger(__name__)

# Annotation written on a member's claim once its removal has been recorded
ANN_PVC_DEFER_DELETING = "tidb.pingcap.com/pvc-defer-deleting"


def claim_name(member_kind: str, group_name: str, ordinal: int) -> str:
    """Name of the claim provisioned for `ordinal` of a group.

    Matches the StatefulSet convention ``<template>-<statefulset>-<ordinal>``
    where the volume claim template is named after the member kind.
    """
    if ordinal < 0:
        raise ValueError(f"ordinal must be non-negative, got {ordinal}")
    return f"{member_kind}-{group_name}-{ordinal}"


@dataclass(frozen=True)
class StorageClaimRecord:
    """The fields of a storage claim the guard inspects.

    `annotations` is None when the claim carries no annotations at all, which
    is distinct from an empty mapping.
    """

    name: str
    annotations: Optional[Dict[str, str]] = None

    @property
    def defer_delete_marker(self) -> Optional[str]:
        if self.annotations is None:
            return None
        return self.annotations.get(ANN_PVC_DEFER_DELETING)


class ClaimStore(ABC):
    """Read, delete and annotate storage claims by name."""

    @abstractmethod
    def get_claim(self, name: str) -> Optional[StorageClaimRecord]:
        """Return the claim, or None when it is not found.

        The view may lag behind recent writes, so None is not authoritative.
        """

    @abstractmethod
    def delete_claim(self, name: str) -> None:
        """Delete the claim; raises on failure."""

    @abstractmethod
    def annotate_claim(
        self, name: str, annotations: Dict[str, Optional[str]]
    ) -> None:
        """Merge `annotations` into the claim's annotations; raises on failure.

        A None value removes that annotation.
        """


class KubernetesClaimStore(ClaimStore):
    """ClaimStore backed by PersistentVolumeClaims in one namespace."""

    def __init__(self, kube_api: KubernetesAPI):
        self.kube_api = kube_api

    def get_claim(self, name: str) -> Optional[StorageClaimRecord]:
        pvc = self.kube_api.get_persistent_volume_claim(name)
        if pvc is None:
            return None
        annotations = pvc.metadata.annotations
        return StorageClaimRecord(
            name=pvc.metadata.name or name,
            annotations=dict(annotations) if annotations is not None else None,
        )

    def delete_claim(self, name: str) -> None:
        self.kube_api.delete_persistent_volume_claim(name)

    def annotate_claim(
        self, name: str, annotations: Dict[str, Optional[str]]
    ) -> None:
        # merge patch: a null value deletes the key
        self.kube_api.patch_persistent_volume_claim(
            name, {"metadata": {"annotations": annotations}}
        )
