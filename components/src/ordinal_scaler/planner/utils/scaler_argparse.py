# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Argument parsing for the ordinal scaler CLI."""

import argparse
from typing import Any, Dict, List

from ordinal_scaler.planner.defaults import ScalerDefaults
from ordinal_scaler.planner.delete_slots import parse_delete_slots
from ordinal_scaler.planner.utils.scaler_config import ScalerConfig


def _delete_slots_arg(value: str) -> List[int]:
    """Accept either a JSON array ("[1,2]") or a comma separated list ("1,2")."""
    text = value.strip()
    if not text.startswith("["):
        text = f"[{text}]"
    try:
        return sorted(parse_delete_slots(text))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def create_scaler_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the ordinal scaler.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Ordinal Scaler - scale a StatefulSet one ordinal at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scale demo-pd to 3 members, retiring ordinals 1, 2 and 3
  python -m ordinal_scaler.planner --group-name demo-pd --member-kind pd \\
    --replicas 3 --delete-slots 1,2,3

  # Load everything from a config file, print the plan without applying it
  python -m ordinal_scaler.planner --config scaler.yaml --no-operation
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML/JSON config file, or an inline JSON string",
    )
    parser.add_argument("--group-name", type=str, default=None, help="StatefulSet name")
    parser.add_argument(
        "--member-kind",
        type=str,
        default=None,
        help=f"Member kind, used as the claim name prefix (default: {ScalerDefaults.member_kind})",
    )
    parser.add_argument(
        "--k8s-namespace",
        type=str,
        default=None,
        help="Kubernetes namespace (default: $POD_NAMESPACE or auto-detected)",
    )
    parser.add_argument(
        "--replicas", type=int, default=None, help="Desired number of replicas"
    )
    parser.add_argument(
        "--delete-slots",
        type=_delete_slots_arg,
        default=None,
        help='Desired delete slots, e.g. "1,3" or "[1,3]"',
    )
    parser.add_argument(
        "--no-operation",
        action="store_true",
        default=None,
        help="Plan and log the steps without changing the cluster",
    )
    parser.add_argument(
        "--no-reclaim-storage",
        dest="reclaim_storage",
        action="store_false",
        default=None,
        help="Do not mark or delete claims of removed members",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Maximum number of steps to apply in this run (default: until converged)",
    )
    parser.add_argument(
        "--step-interval",
        type=float,
        default=None,
        help=f"Seconds to wait between steps (default: {ScalerDefaults.step_interval})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: $ORDINAL_SCALER_LOG or info)",
    )
    parser.add_argument("--log-dir", type=str, default=None, help="Log directory path")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Port for the Prometheus exporter, 0 disables it",
    )

    return parser


# CLI flag -> ScalerConfig field
_OVERRIDES = {
    "group_name": "group_name",
    "member_kind": "member_kind",
    "k8s_namespace": "k8s_namespace",
    "replicas": "desired_replicas",
    "delete_slots": "desired_delete_slots",
    "no_operation": "no_operation",
    "reclaim_storage": "reclaim_storage",
    "max_steps": "max_steps",
    "step_interval": "step_interval",
    "log_level": "log_level",
    "log_dir": "log_dir",
    "metrics_port": "metrics_port",
}


def build_scaler_config(args: argparse.Namespace) -> ScalerConfig:
    """Merge --config with explicit CLI flags; flags win."""
    data: Dict[str, Any] = {}
    if args.config:
        data = ScalerConfig.load_config_data(args.config)

    for arg_name, field_name in _OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is not None:
            data[field_name] = value

    return ScalerConfig.model_validate(data)
