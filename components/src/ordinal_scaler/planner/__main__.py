# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Ordinal Scaler - entry point.

Usage:
    python -m ordinal_scaler.planner --group-name demo-pd --member-kind pd \\
        --replicas 3 --delete-slots 1,2,3
"""

import asyncio
import logging
import sys

from prometheus_client import start_http_server

from ordinal_scaler.common.kube import KubernetesAPI
from ordinal_scaler.common.logging import configure_logging
from ordinal_scaler.planner.group_scaler import GroupScaler, ScalerPrometheusMetrics
from ordinal_scaler.planner.utils.scaler_argparse import (
    build_scaler_config,
    create_scaler_parser,
)
from ordinal_scaler.planner.utils.scaler_config import ScalerConfig
from ordinal_scaler.storage.claims import KubernetesClaimStore
from ordinal_scaler.storage.guard import DeferredStorageGuard

configure_logging()
logger = logging.getLogger(__name__)


async def run(config: ScalerConfig) -> int:
    """Scale the configured group and return a process exit code."""
    kube_api = KubernetesAPI(
        k8s_namespace=config.k8s_namespace, request_timeout=config.request_timeout
    )
    guard = DeferredStorageGuard(KubernetesClaimStore(kube_api))

    metrics = None
    if config.metrics_port > 0:
        start_http_server(config.metrics_port)
        metrics = ScalerPrometheusMetrics()
        logger.info(f"Prometheus metrics served on port {config.metrics_port}")

    desired = config.desired_state()
    logger.info(
        f"Scaling {kube_api.current_namespace}/{config.group_name} "
        f"({config.member_kind}) to replicas={desired.replicas}, "
        f"delete slots={sorted(desired.delete_slots)}"
    )

    scaler = GroupScaler(kube_api, guard, config, metrics=metrics)
    outcome = await scaler.scale(config.group_name, desired)

    logger.info(
        f"Applied {len(outcome.steps)} step(s); converged={outcome.converged}"
    )
    return 0 if outcome.converged else 1


def main(argv=None) -> int:
    parser = create_scaler_parser()
    args = parser.parse_args(argv)
    try:
        config = build_scaler_config(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.log_level, config.log_dir)
    return asyncio.run(run(config))


if __name__ == "__main__":
    sys.exit(main())
