# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

__all__ = [
    "ANN_PVC_DEFER_DELETING",
    "ClaimStore",
    "DeferredStorageGuard",
    "KubernetesClaimStore",
    "SkipReason",
    "StorageClaimRecord",
    "claim_name",
]

from ordinal_scaler.storage.claims import (
    ANN_PVC_DEFER_DELETING,
    ClaimStore,
    KubernetesClaimStore,
    StorageClaimRecord,
    claim_name,
)
from ordinal_scaler.storage.guard import DeferredStorageGuard, SkipReason
