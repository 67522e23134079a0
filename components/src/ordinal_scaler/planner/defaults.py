# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0


# Source of truth for scaler defaults
class ScalerDefaults:
    environment = "kubernetes"
    member_kind = "data"
    no_operation = False
    log_dir = None
    log_level = "info"
    max_steps = None  # no limit; stop at the fixpoint
    step_interval = 0.0  # in seconds, pause between applied steps
    request_timeout = 30.0  # in seconds, per Kubernetes API call
    reclaim_storage = True
    metrics_port = 0  # 0 disables the prometheus exporter
    metrics_prefix = "ordinal_scaler"
