# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import ast
import inspect
from unittest.mock import MagicMock

import pytest
from kubernetes import client

from ordinal_scaler.storage import claims, guard
from ordinal_scaler.storage.claims import (
    ANN_PVC_DEFER_DELETING,
    KubernetesClaimStore,
    StorageClaimRecord,
    claim_name,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.storage,
]


def test_claim_name():
    assert claim_name("pd", "demo-pd", 3) == "pd-demo-pd-3"
    assert claim_name("tikv", "demo-tikv", 0) == "tikv-demo-tikv-0"


def test_claim_name_is_injective_in_ordinal():
    names = {claim_name("pd", "demo-pd", o) for o in range(200)}
    assert len(names) == 200


def test_claim_name_rejects_negative_ordinal():
    with pytest.raises(ValueError):
        claim_name("pd", "demo-pd", -1)


def test_defer_delete_marker():
    assert StorageClaimRecord("a").defer_delete_marker is None
    assert StorageClaimRecord("a", {}).defer_delete_marker is None
    assert StorageClaimRecord("a", {ANN_PVC_DEFER_DELETING: "x"}).defer_delete_marker == "x"


@pytest.fixture
def kube_api():
    return MagicMock()


def test_kubernetes_claim_store_get(kube_api):
    kube_api.get_persistent_volume_claim.return_value = client.V1PersistentVolumeClaim(
        metadata=client.V1ObjectMeta(
            name="pd-demo-pd-3", annotations={ANN_PVC_DEFER_DELETING: "t"}
        )
    )
    store = KubernetesClaimStore(kube_api)

    record = store.get_claim("pd-demo-pd-3")

    assert record == StorageClaimRecord("pd-demo-pd-3", {ANN_PVC_DEFER_DELETING: "t"})
    kube_api.get_persistent_volume_claim.assert_called_once_with("pd-demo-pd-3")


def test_kubernetes_claim_store_keeps_nil_annotations(kube_api):
    kube_api.get_persistent_volume_claim.return_value = client.V1PersistentVolumeClaim(
        metadata=client.V1ObjectMeta(name="pd-demo-pd-3")
    )

    record = KubernetesClaimStore(kube_api).get_claim("pd-demo-pd-3")

    assert record.annotations is None


def test_kubernetes_claim_store_not_found(kube_api):
    kube_api.get_persistent_volume_claim.return_value = None

    assert KubernetesClaimStore(kube_api).get_claim("pd-demo-pd-3") is None


def test_kubernetes_claim_store_delete_and_annotate(kube_api):
    store = KubernetesClaimStore(kube_api)

    store.delete_claim("pd-demo-pd-3")
    store.annotate_claim("pd-demo-pd-3", {ANN_PVC_DEFER_DELETING: "t"})

    kube_api.delete_persistent_volume_claim.assert_called_once_with("pd-demo-pd-3")
    kube_api.patch_persistent_volume_claim.assert_called_once_with(
        "pd-demo-pd-3", {"metadata": {"annotations": {ANN_PVC_DEFER_DELETING: "t"}}}
    )


def test_kubernetes_claim_store_removes_annotation_with_null(kube_api):
    KubernetesClaimStore(kube_api).annotate_claim(
        "pd-demo-pd-3", {ANN_PVC_DEFER_DELETING: None}
    )

    kube_api.patch_persistent_volume_claim.assert_called_once_with(
        "pd-demo-pd-3", {"metadata": {"annotations": {ANN_PVC_DEFER_DELETING: None}}}
    )


@pytest.mark.parametrize("module", [claims, guard])
def test_storage_shares_only_naming_with_planner(module):
    tree = ast.parse(inspect.getsource(module))
    imported = {
        node.module for node in ast.walk(tree) if isinstance(node, ast.ImportFrom)
    }
    assert not any(name.startswith("ordinal_scaler.planner") for name in imported)
