# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ordinal_scaler.planner.defaults import ScalerDefaults
from ordinal_scaler.planner.scaler import GroupState

logger = logging.getLogger(__name__)


class ScalerConfig(BaseModel):
    """Pydantic configuration for the ordinal scaler.

    Describes which member group to scale, its desired state, and how the
    reconcile loop talks to the cluster. Defaults come from ScalerDefaults.
    """

    environment: Literal["kubernetes"] = ScalerDefaults.environment
    k8s_namespace: Optional[str] = Field(
        default_factory=lambda: os.environ.get("POD_NAMESPACE"),
        description="Kubernetes namespace of the group. Auto-detected in-cluster when unset.",
    )

    group_name: str = Field(description="Name of the StatefulSet backing the group")
    member_kind: str = ScalerDefaults.member_kind

    desired_replicas: int = Field(ge=0)
    desired_delete_slots: List[int] = Field(default_factory=list)

    no_operation: bool = ScalerDefaults.no_operation
    max_steps: Optional[int] = ScalerDefaults.max_steps
    step_interval: float = ScalerDefaults.step_interval
    request_timeout: Optional[float] = ScalerDefaults.request_timeout
    reclaim_storage: bool = ScalerDefaults.reclaim_storage

    log_level: str = Field(
        default_factory=lambda: os.environ.get(
            "ORDINAL_SCALER_LOG", ScalerDefaults.log_level
        )
    )
    log_dir: Optional[str] = ScalerDefaults.log_dir
    metrics_port: int = Field(
        default_factory=lambda: int(
            os.environ.get("ORDINAL_SCALER_METRICS_PORT", ScalerDefaults.metrics_port)
        )
    )

    @field_validator("desired_delete_slots")
    @classmethod
    def _validate_delete_slots(cls, value: List[int]) -> List[int]:
        negative = [s for s in value if s < 0]
        if negative:
            raise ValueError(f"desired_delete_slots must be non-negative, got {negative}")
        return sorted(set(value))

    @model_validator(mode="after")
    def _validate_config(self) -> "ScalerConfig":
        if not self.group_name:
            raise ValueError("group_name must not be empty")

        if self.max_steps is not None and self.max_steps < 1:
            raise ValueError(
                f"max_steps ({self.max_steps}) must be at least 1 when set. "
                "Leave it unset to run until the group converges."
            )

        if self.step_interval < 0:
            raise ValueError(f"step_interval must be >= 0, got {self.step_interval}")

        if self.no_operation and self.reclaim_storage:
            logger.warning(
                "Storage reclamation is skipped in no-operation mode; "
                "no claims will be marked or deleted."
            )

        return self

    def desired_state(self) -> GroupState:
        return GroupState(
            replicas=self.desired_replicas,
            delete_slots=frozenset(self.desired_delete_slots),
        )

    @classmethod
    def from_config_arg(cls, config_arg: str) -> "ScalerConfig":
        """Create a ScalerConfig from a CLI --config argument.

        Auto-detects whether the argument is a file path (JSON/YAML) or an
        inline JSON string, loads it, and validates.
        """
        return cls.model_validate(cls.load_config_data(config_arg))

    @classmethod
    def load_config_data(cls, config_arg: str) -> Dict[str, Any]:
        """Load the raw mapping behind a --config argument without validating it."""
        path = Path(config_arg)
        if path.is_file():
            data = cls._load_from_file(path)
        else:
            # Try parsing as inline JSON
            try:
                data = json.loads(config_arg)
            except json.JSONDecodeError as e:
                raise ValueError(
                    f"--config value is neither a valid file path nor valid JSON: {e}"
                ) from e

        if not isinstance(data, dict):
            raise ValueError(f"--config value '{config_arg}' must contain a mapping")
        return data

    @staticmethod
    def _load_from_file(path: Path) -> Any:
        suffix = path.suffix.lower()
        text = path.read_text()

        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        if suffix == ".json":
            return json.loads(text)

        # Try JSON first, then YAML
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return yaml.safe_load(text)
