# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest

from ordinal_scaler.common.logging import configure_logging, resolve_log_level

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        (" error ", logging.ERROR),
        ("bogus", logging.INFO),
    ],
)
def test_resolve_log_level(name, expected):
    assert resolve_log_level(name) == expected


def test_resolve_log_level_from_env(monkeypatch):
    monkeypatch.setenv("ORDINAL_SCALER_LOG", "debug")
    assert resolve_log_level() == logging.DEBUG
    monkeypatch.delenv("ORDINAL_SCALER_LOG")
    assert resolve_log_level() == logging.INFO


def test_configure_logging_writes_log_file(tmp_path, restore_root_logger):
    log_dir = tmp_path / "logs"

    configure_logging("warning", str(log_dir))
    logging.getLogger("ordinal_scaler.test").warning("scaled demo-pd")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.WARNING
    assert "scaled demo-pd" in (log_dir / "ordinal_scaler.log").read_text()


def test_configure_logging_attaches_log_file_once(tmp_path, restore_root_logger):
    configure_logging("info", str(tmp_path))
    configure_logging("debug", str(tmp_path))

    file_handlers = [
        h
        for h in restore_root_logger.handlers
        if isinstance(h, logging.FileHandler)
        and h.baseFilename == str(tmp_path / "ordinal_scaler.log")
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG
