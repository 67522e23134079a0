# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Any, Dict, Optional

from kubernetes import client, config

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_NAMESPACE_FILE = (
    "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
)

# Advanced StatefulSet; the native apps/v1 controller ignores delete slots
ADVANCED_STATEFULSET_GROUP = "apps.pingcap.com"
ADVANCED_STATEFULSET_VERSION = "v1"
ADVANCED_STATEFULSET_PLURAL = "statefulsets"
ADVANCED_STATEFULSET_API_VERSION = (
    f"{ADVANCED_STATEFULSET_GROUP}/{ADVANCED_STATEFULSET_VERSION}"
)


def get_current_k8s_namespace() -> str:
    """Get the current namespace if running inside a k8s cluster"""
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, "r") as f:
            return f.read().strip()
    except FileNotFoundError:
        # Fallback to 'default' if not running in k8s
        return "default"


class KubernetesAPI:
    """Thin wrapper over the Advanced StatefulSet and PersistentVolumeClaim APIs.

    Member groups are Advanced StatefulSets (``apps.pingcap.com/v1``), read and
    patched as custom objects in their dict form. Reads translate a 404 into
    None so callers can treat absence as a normal outcome; every other
    ApiException propagates.
    """

    def __init__(
        self,
        k8s_namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ):
        # Load kubernetes configuration
        try:
            config.load_incluster_config()  # for in-cluster deployment
        except config.ConfigException:
            config.load_kube_config()  # for out-of-cluster deployment

        self.custom_api = client.CustomObjectsApi()
        self.core_api = client.CoreV1Api()
        self.current_namespace = k8s_namespace or get_current_k8s_namespace()
        self.request_timeout = request_timeout

    def _call_kwargs(self) -> Dict[str, Any]:
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    def get_statefulset(self, name: str) -> Optional[Dict[str, Any]]:
        try:
            return self.custom_api.get_namespaced_custom_object(
                group=ADVANCED_STATEFULSET_GROUP,
                version=ADVANCED_STATEFULSET_VERSION,
                namespace=self.current_namespace,
                plural=ADVANCED_STATEFULSET_PLURAL,
                name=name,
                **self._call_kwargs(),
            )
        except client.ApiException as e:
            if e.status == 404:
                return None
            raise

    def patch_statefulset(self, name: str, body: Dict[str, Any]):
        logger.debug(f"Patching StatefulSet {self.current_namespace}/{name}: {body}")
        return self.custom_api.patch_namespaced_custom_object(
            group=ADVANCED_STATEFULSET_GROUP,
            version=ADVANCED_STATEFULSET_VERSION,
            namespace=self.current_namespace,
            plural=ADVANCED_STATEFULSET_PLURAL,
            name=name,
            body=body,
            **self._call_kwargs(),
        )

    def get_persistent_volume_claim(
        self, name: str
    ) -> Optional[client.V1PersistentVolumeClaim]:
        try:
            return self.core_api.read_namespaced_persistent_volume_claim(
                name=name, namespace=self.current_namespace, **self._call_kwargs()
            )
        except client.ApiException as e:
            if e.status == 404:
                return None
            raise

    def patch_persistent_volume_claim(self, name: str, body: Dict[str, Any]):
        return self.core_api.patch_namespaced_persistent_volume_claim(
            name=name,
            namespace=self.current_namespace,
            body=body,
            **self._call_kwargs(),
        )

    def delete_persistent_volume_claim(self, name: str):
        logger.info(f"Deleting PVC {self.current_namespace}/{name}")
        return self.core_api.delete_namespaced_persistent_volume_claim(
            name=name, namespace=self.current_namespace, **self._call_kwargs()
        )
