# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the ordinal scaler.

Expected absences (a claim that is not there yet, a marker that was never
written) are not errors and never show up here; they are reported as
``SkipReason`` values by the storage guard.
"""

from typing import Optional


class OrdinalScalerError(Exception):
    """Base class for all ordinal scaler errors."""


class InvalidDeleteSlotsError(OrdinalScalerError, ValueError):
    """Raised when a delete-slots annotation cannot be decoded."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid delete slots {value!r}: {reason}")


class GroupNotFoundError(OrdinalScalerError):
    """Raised when the StatefulSet backing a member group does not exist."""

    def __init__(self, group_name: str, namespace: str):
        self.group_name = group_name
        self.namespace = namespace
        super().__init__(
            f"StatefulSet {namespace}/{group_name} not found. "
            "Cannot plan scaling for a group that does not exist."
        )


class ClaimLookupError(OrdinalScalerError):
    """Raised when reading a storage claim fails for a reason other than not-found."""

    def __init__(self, claim_name: str, ordinal: Optional[int] = None):
        self.claim_name = claim_name
        self.ordinal = ordinal
        super().__init__(f"Failed to get pvc {claim_name} (ordinal {ordinal})")


class ClaimDeletionError(OrdinalScalerError):
    """Raised when deleting a storage claim fails.

    The underlying client error is chained as ``__cause__`` and repeated in
    the message so callers that only log ``str(err)`` still see it.
    """

    def __init__(self, claim_name: str, ordinal: int, cause: BaseException):
        self.claim_name = claim_name
        self.ordinal = ordinal
        super().__init__(
            f"Failed to delete pvc {claim_name} (ordinal {ordinal}): {cause}"
        )


class DeleteSlotsUnsupportedError(OrdinalScalerError):
    """Raised when delete slots are requested for a workload that ignores them.

    The native ``apps/v1`` StatefulSet controller always runs ordinals
    ``0..replicas-1``; acting on delete slots there would retire (and reclaim
    the storage of) a different member than the one the controller removes.
    """

    def __init__(self, group_name: str, api_version: Optional[str]):
        self.group_name = group_name
        self.api_version = api_version
        super().__init__(
            f"StatefulSet {group_name} ({api_version or 'unknown apiVersion'}) "
            "does not support delete slots; use an Advanced StatefulSet"
        )
