# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Ordinal Scaler - incremental scaling for ordinally identified member groups.

Architecture:
- planner.ordinals derives the live ordinal set from replicas + delete slots
- planner.scaler computes one GROW/SHRINK step at a time toward a target
- storage.guard deletes a removed member's claim only once it is marked
- planner.group_scaler drives a StatefulSet to its target through the above
"""
