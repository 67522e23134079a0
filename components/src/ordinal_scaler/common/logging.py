# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import os
from typing import Optional

LOG_LEVEL_ENV_VAR = "ORDINAL_SCALER_LOG"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_log_level(level: Optional[str] = None) -> int:
    """Map a level name (or ORDINAL_SCALER_LOG when None) to a logging level."""
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR, "info")).strip().lower()
    return _LEVELS.get(name, logging.INFO)


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None):
    """
    Configure root logging for ordinal scaler entry points.

    Safe to call more than once; basicConfig is a no-op once handlers exist,
    but the level is always re-applied so CLI flags can override the env var.
    A log file handler is attached at most once per log file.
    """
    log_level = resolve_log_level(level)
    logging.basicConfig(level=log_level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root = logging.getLogger()
    root.setLevel(log_level)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.abspath(os.path.join(log_dir, "ordinal_scaler.log"))
        for handler in root.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and handler.baseFilename == log_path
            ):
                handler.setLevel(log_level)
                return
        log_file_handler = logging.FileHandler(log_path)
        log_file_handler.setLevel(log_level)
        log_file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(log_file_handler)
