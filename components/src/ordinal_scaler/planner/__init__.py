# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

__all__ = [
    "GroupState",
    "ScaleDirection",
    "ScaleStep",
    "ordinal_width",
    "plan_scaling",
    "resolve_ordinals",
    "resolve_ordinals_scan",
    "scale_one",
]

from ordinal_scaler.planner.ordinals import (
    ordinal_width,
    resolve_ordinals,
    resolve_ordinals_scan,
)
from ordinal_scaler.planner.scaler import (
    GroupState,
    ScaleDirection,
    ScaleStep,
    plan_scaling,
    scale_one,
)
