# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Deferred storage reclamation guard.

A removed member's claim is only deleted once a non-empty defer-delete marker
has been observed on it. The marker is written by an earlier, independent
step as durable evidence that the removal was recorded; deleting storage
without it could destroy the data of a member whose retirement was never
confirmed.

A missing claim or marker is expected transient state (the read path may lag
writes) and is reported as a SkipReason, never as an error. Only failing
lookups and deletions raise.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, Optional

from ordinal_scaler.common.exceptions import ClaimDeletionError, ClaimLookupError
from ordinal_scaler.storage.claims import (
    ANN_PVC_DEFER_DELETING,
    ClaimStore,
    StorageClaimRecord,
    claim_name,
)

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    """Why a claim was not deleted during this pass."""

    CLAIM_NOT_FOUND = "scaler: pvc is not found"
    MARKER_ABSENT = "scaler: pvc's annotation is nil"
    MARKER_EMPTY = "scaler: pvc's annotation defer deleting is empty"


class DeferredStorageGuard:
    def __init__(self, claim_store: ClaimStore):
        self.claim_store = claim_store

    def _get_claim(self, name: str, ordinal: int) -> Optional[StorageClaimRecord]:
        try:
            return self.claim_store.get_claim(name)
        except Exception as e:
            raise ClaimLookupError(name, ordinal) from e

    def reclaim(
        self, group_name: str, member_kind: str, ordinal: int
    ) -> Dict[int, SkipReason]:
        """Delete the claim of a retired member if its defer-delete marker is set.

        Args:
            group_name: Name of the member group (StatefulSet)
            member_kind: Kind of member, used as the claim name prefix
            ordinal: Ordinal of the retired member

        Returns:
            Skip reasons keyed by ordinal; empty when the claim was deleted

        Raises:
            ClaimLookupError: If reading the claim fails
            ClaimDeletionError: If the delete call fails, including timeouts
        """
        skip_reasons: Dict[int, SkipReason] = {}
        name = claim_name(member_kind, group_name, ordinal)

        claim = self._get_claim(name, ordinal)
        if claim is None:
            skip_reasons[ordinal] = SkipReason.CLAIM_NOT_FOUND
            logger.debug(f"Skip reclaiming pvc {name}: {skip_reasons[ordinal].value}")
            return skip_reasons
        if claim.annotations is None:
            skip_reasons[ordinal] = SkipReason.MARKER_ABSENT
            logger.debug(f"Skip reclaiming pvc {name}: {skip_reasons[ordinal].value}")
            return skip_reasons
        if not claim.defer_delete_marker:
            skip_reasons[ordinal] = SkipReason.MARKER_EMPTY
            logger.debug(f"Skip reclaiming pvc {name}: {skip_reasons[ordinal].value}")
            return skip_reasons

        try:
            self.claim_store.delete_claim(name)
        except Exception as e:
            raise ClaimDeletionError(name, ordinal, e) from e

        logger.info(
            f"Reclaimed pvc {name} of {member_kind} {group_name} ordinal {ordinal}"
        )
        return skip_reasons

    def reclaim_many(
        self, group_name: str, member_kind: str, ordinals: Iterable[int]
    ) -> Dict[int, SkipReason]:
        """Reclaim several ordinals, merging their skip reasons.

        Stops at the first hard error; ordinals after it are not attempted.
        """
        skip_reasons: Dict[int, SkipReason] = {}
        for ordinal in sorted(set(ordinals)):
            skip_reasons.update(self.reclaim(group_name, member_kind, ordinal))
        return skip_reasons

    def mark_defer_deleting(
        self,
        group_name: str,
        member_kind: str,
        ordinal: int,
        now: Optional[datetime] = None,
    ) -> Optional[SkipReason]:
        """Record on a member's claim that its removal was intended.

        An existing non-empty marker is left untouched so repeated calls keep
        the first timestamp.

        Returns:
            SkipReason.CLAIM_NOT_FOUND when there is no claim to mark, else None
        """
        name = claim_name(member_kind, group_name, ordinal)
        claim = self._get_claim(name, ordinal)
        if claim is None:
            return SkipReason.CLAIM_NOT_FOUND
        if claim.defer_delete_marker:
            logger.debug(f"pvc {name} already marked: {claim.defer_delete_marker}")
            return None

        marker = (now or datetime.now(timezone.utc)).isoformat()
        self.claim_store.annotate_claim(name, {ANN_PVC_DEFER_DELETING: marker})
        logger.info(f"Marked pvc {name} for deferred deletion at {marker}")
        return None

    def clear_defer_deleting(
        self, group_name: str, member_kind: str, ordinal: int
    ) -> None:
        """Remove the defer-delete marker from a member that is still live.

        Used when the removal the marker announced did not happen, so a later
        reclaim cannot delete the storage of a running member.
        """
        name = claim_name(member_kind, group_name, ordinal)
        claim = self._get_claim(name, ordinal)
        if claim is None or not claim.defer_delete_marker:
            return
        self.claim_store.annotate_claim(name, {ANN_PVC_DEFER_DELETING: None})
        logger.info(f"Cleared deferred deletion marker from pvc {name}")
