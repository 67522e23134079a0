# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for ScalerConfig validation and loading."""

import json

import pytest
from pydantic import ValidationError

from ordinal_scaler.planner.scaler import GroupState
from ordinal_scaler.planner.utils.scaler_config import ScalerConfig

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.planner,
]


def test_defaults(monkeypatch):
    """Test ScalerConfig falls back to ScalerDefaults."""
    monkeypatch.delenv("POD_NAMESPACE", raising=False)
    monkeypatch.delenv("ORDINAL_SCALER_LOG", raising=False)
    monkeypatch.delenv("ORDINAL_SCALER_METRICS_PORT", raising=False)

    config = ScalerConfig(group_name="demo-pd", desired_replicas=3)

    assert config.environment == "kubernetes"
    assert config.k8s_namespace is None
    assert config.member_kind == "data"
    assert config.desired_delete_slots == []
    assert config.no_operation is False
    assert config.max_steps is None
    assert config.reclaim_storage is True
    assert config.log_level == "info"
    assert config.metrics_port == 0


def test_env_defaults(monkeypatch):
    """Test namespace, log level and metrics port are read from the environment."""
    monkeypatch.setenv("POD_NAMESPACE", "tidb-cluster")
    monkeypatch.setenv("ORDINAL_SCALER_LOG", "debug")
    monkeypatch.setenv("ORDINAL_SCALER_METRICS_PORT", "9100")

    config = ScalerConfig(group_name="demo-pd", desired_replicas=3)

    assert config.k8s_namespace == "tidb-cluster"
    assert config.log_level == "debug"
    assert config.metrics_port == 9100


def test_desired_state():
    config = ScalerConfig(
        group_name="demo-pd", desired_replicas=3, desired_delete_slots=[3, 1, 2, 1]
    )
    assert config.desired_delete_slots == [1, 2, 3]
    assert config.desired_state() == GroupState(3, frozenset({1, 2, 3}))


def test_rejects_negative_replicas():
    with pytest.raises(ValidationError):
        ScalerConfig(group_name="demo-pd", desired_replicas=-1)


def test_rejects_negative_delete_slots():
    with pytest.raises(ValidationError, match="must be non-negative"):
        ScalerConfig(group_name="demo-pd", desired_replicas=1, desired_delete_slots=[-2])


def test_rejects_empty_group_name():
    with pytest.raises(ValidationError, match="group_name must not be empty"):
        ScalerConfig(group_name="", desired_replicas=1)


def test_requires_group_and_replicas():
    with pytest.raises(ValidationError):
        ScalerConfig(desired_replicas=1)
    with pytest.raises(ValidationError):
        ScalerConfig(group_name="demo-pd")


@pytest.mark.parametrize("max_steps", [0, -3])
def test_rejects_non_positive_max_steps(max_steps):
    with pytest.raises(ValidationError, match="must be at least 1"):
        ScalerConfig(group_name="demo-pd", desired_replicas=1, max_steps=max_steps)


def test_rejects_negative_step_interval():
    with pytest.raises(ValidationError, match="step_interval must be >= 0"):
        ScalerConfig(group_name="demo-pd", desired_replicas=1, step_interval=-1)


def test_invalid_environment():
    with pytest.raises(ValidationError):
        ScalerConfig(group_name="demo-pd", desired_replicas=1, environment="virtual")


def test_from_config_arg_inline_json():
    config = ScalerConfig.from_config_arg(
        json.dumps(
            {"group_name": "demo-tikv", "member_kind": "tikv", "desired_replicas": 4}
        )
    )
    assert config.group_name == "demo-tikv"
    assert config.member_kind == "tikv"
    assert config.desired_replicas == 4


def test_from_config_arg_yaml_file(tmp_path):
    path = tmp_path / "scaler.yaml"
    path.write_text(
        "group_name: demo-pd\n"
        "member_kind: pd\n"
        "desired_replicas: 3\n"
        "desired_delete_slots: [1, 2, 3]\n"
        "max_steps: 2\n"
    )

    config = ScalerConfig.from_config_arg(str(path))

    assert config.desired_state() == GroupState(3, frozenset({1, 2, 3}))
    assert config.max_steps == 2


def test_from_config_arg_json_file(tmp_path):
    path = tmp_path / "scaler.json"
    path.write_text(json.dumps({"group_name": "demo-pd", "desired_replicas": 2}))

    assert ScalerConfig.from_config_arg(str(path)).desired_replicas == 2


def test_from_config_arg_file_without_suffix(tmp_path):
    path = tmp_path / "scaler"
    path.write_text("group_name: demo-pd\ndesired_replicas: 5\n")

    assert ScalerConfig.from_config_arg(str(path)).desired_replicas == 5


def test_from_config_arg_invalid():
    with pytest.raises(ValueError, match="neither a valid file path nor valid JSON"):
        ScalerConfig.from_config_arg("/nonexistent/scaler.yaml")


def test_from_config_arg_not_a_mapping():
    with pytest.raises(ValueError, match="must contain a mapping"):
        ScalerConfig.from_config_arg("[1, 2]")
