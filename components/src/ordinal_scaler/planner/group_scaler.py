# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

from ordinal_scaler.common.exceptions import (
    DeleteSlotsUnsupportedError,
    GroupNotFoundError,
)
from ordinal_scaler.common.kube import KubernetesAPI
from ordinal_scaler.planner.defaults import ScalerDefaults
from ordinal_scaler.planner.delete_slots import (
    build_scale_patch,
    group_state_from_statefulset,
    statefulset_api_version,
    supports_delete_slots,
)
from ordinal_scaler.planner.scaler import (
    GroupState,
    ScaleDirection,
    ScaleStep,
    plan_scaling,
    scale_one,
)
from ordinal_scaler.planner.utils.scaler_config import ScalerConfig
from ordinal_scaler.storage.guard import DeferredStorageGuard, SkipReason

logger = logging.getLogger(__name__)


class ScalerPrometheusMetrics:
    """Container for all scaler Prometheus metrics."""

    def __init__(
        self,
        prefix: str = ScalerDefaults.metrics_prefix,
        registry: CollectorRegistry = REGISTRY,
    ):
        self.replicas = Gauge(
            f"{prefix}:replicas",
            "Observed replicas of the member group",
            ["group"],
            registry=registry,
        )
        self.scale_steps = Counter(
            f"{prefix}:scale_steps",
            "Scale steps applied to the member group",
            ["group", "direction"],
            registry=registry,
        )
        self.reclaimed_claims = Counter(
            f"{prefix}:reclaimed_claims",
            "Storage claims deleted after their member was removed",
            ["group"],
            registry=registry,
        )
        self.reclaim_skips = Counter(
            f"{prefix}:reclaim_skips",
            "Storage claims left in place during a pass, by reason",
            ["group", "reason"],
            registry=registry,
        )


@dataclass
class ScaleOutcome:
    steps: List[ScaleStep] = field(default_factory=list)
    skip_reasons: Dict[int, SkipReason] = field(default_factory=dict)
    converged: bool = False
    final_state: Optional[GroupState] = None


class GroupScaler:
    """Drives one member group to its desired state, one ordinal at a time.

    Every iteration re-reads the StatefulSet, asks scale_one for the next
    step and applies only that step. Removing a member marks its claim for
    deferred deletion before the StatefulSet shrinks and reclaims it after;
    adding a member first reclaims a claim left marked by an earlier removal
    so the new member starts with fresh storage.

    Kubernetes and claim-store calls block, so they run in worker threads to
    keep other groups' loops on the event loop moving.
    """

    def __init__(
        self,
        kube_api: KubernetesAPI,
        guard: DeferredStorageGuard,
        config: ScalerConfig,
        metrics: Optional[ScalerPrometheusMetrics] = None,
    ):
        self.kube_api = kube_api
        self.guard = guard
        self.config = config
        self.member_kind = config.member_kind
        self.metrics = metrics
        # one structural change in flight per group
        self._locks: Dict[str, asyncio.Lock] = {}

    def _group_key(self, group_name: str) -> str:
        return f"{self.kube_api.current_namespace}/{group_name}"

    def _read_group(self, group_name: str) -> Tuple[Any, GroupState]:
        statefulset = self.kube_api.get_statefulset(group_name)
        if statefulset is None:
            raise GroupNotFoundError(group_name, self.kube_api.current_namespace)
        state = group_state_from_statefulset(statefulset)
        if self.metrics:
            self.metrics.replicas.labels(group=group_name).set(state.replicas)
        return statefulset, state

    def observe(self, group_name: str) -> GroupState:
        return self._read_group(group_name)[1]

    def _check_delete_slots_supported(
        self,
        group_name: str,
        statefulset: Any,
        actual: GroupState,
        desired: GroupState,
    ) -> None:
        # The native controller always runs 0..replicas-1, so any delete slot
        # would make the planner retire (and reclaim) the wrong member.
        if (actual.delete_slots or desired.delete_slots) and not supports_delete_slots(
            statefulset
        ):
            raise DeleteSlotsUnsupportedError(
                group_name, statefulset_api_version(statefulset)
            )

    async def scale(self, group_name: str, desired: GroupState) -> ScaleOutcome:
        """Scale the group until it matches `desired` or max_steps is reached."""
        lock = self._locks.setdefault(self._group_key(group_name), asyncio.Lock())
        async with lock:
            if self.config.no_operation:
                return await asyncio.to_thread(self._dry_run, group_name, desired)
            return await self._scale(group_name, desired)

    def _dry_run(self, group_name: str, desired: GroupState) -> ScaleOutcome:
        statefulset, actual = self._read_group(group_name)
        self._check_delete_slots_supported(group_name, statefulset, actual, desired)
        steps = plan_scaling(actual, desired, max_steps=self.config.max_steps)
        for step in steps:
            logger.info(
                f"[no-op] {group_name}: would {step.direction.value} ordinal "
                f"{step.ordinal} -> replicas {step.replicas}, "
                f"delete slots {sorted(step.delete_slots)}"
            )
        final_state = steps[-1].apply_to(actual) if steps else actual
        converged = scale_one(final_state, desired).is_noop
        return ScaleOutcome(steps=steps, converged=converged, final_state=final_state)

    async def _scale(self, group_name: str, desired: GroupState) -> ScaleOutcome:
        outcome = ScaleOutcome()
        max_steps = self.config.max_steps

        while True:
            statefulset, actual = await asyncio.to_thread(self._read_group, group_name)
            self._check_delete_slots_supported(group_name, statefulset, actual, desired)
            outcome.final_state = actual
            step = scale_one(actual, desired)
            if step.is_noop:
                outcome.converged = True
                logger.info(
                    f"{group_name} matches desired state: replicas={actual.replicas}, "
                    f"delete slots={sorted(actual.delete_slots)}"
                )
                break
            if max_steps is not None and len(outcome.steps) >= max_steps:
                logger.info(
                    f"{group_name}: reached max_steps ({max_steps}) before converging"
                )
                break

            outcome.skip_reasons.update(await self.apply_step(group_name, step))
            outcome.steps.append(step)

            if self.config.step_interval > 0:
                await asyncio.sleep(self.config.step_interval)

        if outcome.skip_reasons:
            deferred = {o: r.value for o, r in sorted(outcome.skip_reasons.items())}
            logger.warning(
                f"{group_name}: storage reclamation deferred for ordinals {deferred}"
            )
        return outcome

    async def apply_step(self, group_name: str, step: ScaleStep) -> Dict[int, SkipReason]:
        """Apply a single GROW or SHRINK step and handle the member's storage.

        Returns:
            Skip reasons for claims that could not be reclaimed yet after a SHRINK
        """
        skip_reasons: Dict[int, SkipReason] = {}
        reclaim = self.config.reclaim_storage
        shrinking = step.direction is ScaleDirection.SHRINK and reclaim

        if step.direction is ScaleDirection.GROW and reclaim:
            # A claim left marked by an earlier removal must not be reused
            leftover = await asyncio.to_thread(
                self.guard.reclaim, group_name, self.member_kind, step.ordinal
            )
            if not leftover and self.metrics:
                self.metrics.reclaimed_claims.labels(group=group_name).inc()
        elif shrinking:
            await asyncio.to_thread(
                self.guard.mark_defer_deleting,
                group_name,
                self.member_kind,
                step.ordinal,
            )

        logger.info(
            f"{group_name}: {step.direction.value} ordinal {step.ordinal}, "
            f"replicas -> {step.replicas}, delete slots -> {sorted(step.delete_slots)}"
        )
        try:
            await asyncio.to_thread(
                self.kube_api.patch_statefulset,
                group_name,
                build_scale_patch(step.replicas, step.delete_slots),
            )
        except Exception:
            if shrinking:
                # the member is still running; its claim must not stay marked
                logger.warning(
                    f"{group_name}: patch failed, clearing deferred deletion "
                    f"marker of ordinal {step.ordinal}"
                )
                await asyncio.to_thread(
                    self.guard.clear_defer_deleting,
                    group_name,
                    self.member_kind,
                    step.ordinal,
                )
            raise

        if self.metrics:
            self.metrics.scale_steps.labels(
                group=group_name, direction=step.direction.value
            ).inc()

        if shrinking:
            skip_reasons = await asyncio.to_thread(
                self.guard.reclaim, group_name, self.member_kind, step.ordinal
            )
            if self.metrics:
                if skip_reasons:
                    for reason in skip_reasons.values():
                        self.metrics.reclaim_skips.labels(
                            group=group_name, reason=reason.name.lower()
                        ).inc()
                else:
                    self.metrics.reclaimed_claims.labels(group=group_name).inc()

        return skip_reasons
