"""Tests for kind specific merge functions."""

import copy

import pytest

from ssp_operands import MERGE_FUNCTIONS, UnsupportedKindError, merge_function_for
from ssp_operands.merge import (
    keep_existing,
    merge_binding,
    merge_deployment,
    merge_rules,
    merge_service,
    merge_template,
    merge_webhooks,
    strip_deprecated_labels,
)


class TestMergeFunctions:
    """Test cases for merge functions."""

    def test_rules_are_replaced(self):
        desired = {"rules": [{"verbs": ["get"]}]}
        found = {"metadata": {"uid": "1"}, "rules": [{"verbs": ["*"]}]}

        merge_rules(desired, found)

        assert found == {"metadata": {"uid": "1"}, "rules": [{"verbs": ["get"]}]}

    def test_copied_fields_do_not_alias_desired(self):
        desired = {"rules": [{"verbs": ["get"]}]}
        found = {}

        merge_rules(desired, found)
        found["rules"][0]["verbs"].append("delete")

        assert desired["rules"][0]["verbs"] == ["get"]

    def test_field_missing_from_desired_is_removed(self):
        found = {"rules": [{"verbs": ["*"]}]}

        merge_rules({}, found)

        assert "rules" not in found

    def test_binding(self):
        desired = {
            "subjects": [{"kind": "Group", "name": "system:authenticated"}],
            "roleRef": {"kind": "Role", "name": "view"},
        }
        found = {"subjects": [], "roleRef": {"kind": "Role", "name": "old"}}

        merge_binding(desired, found)

        assert found == desired

    def test_template_keeps_labels(self):
        desired = {"objects": [{"kind": "VirtualMachine"}], "parameters": [{"name": "NAME"}]}
        found = {"metadata": {"labels": {"a": "b"}}, "objects": [], "parameters": []}

        merge_template(desired, found)

        assert found["objects"] == [{"kind": "VirtualMachine"}]
        assert found["parameters"] == [{"name": "NAME"}]
        assert found["metadata"] == {"labels": {"a": "b"}}

    def test_service_keeps_allocated_fields(self):
        desired = {"spec": {"ports": [{"port": 443}], "selector": {"app": "x"}}}
        found = {"spec": {"clusterIP": "10.0.0.1", "ports": [{"port": 80}], "selector": {}}}

        merge_service(desired, found)

        assert found["spec"] == {
            "clusterIP": "10.0.0.1",
            "ports": [{"port": 443}],
            "selector": {"app": "x"},
        }

    def test_service_keeps_defaulted_port_fields(self):
        desired = {"spec": {"ports": [{"name": "webhook", "port": 443}]}}
        found = {"spec": {"ports": [{"name": "webhook", "port": 443, "protocol": "TCP"}]}}

        merge_service(desired, found)

        assert found["spec"]["ports"] == [{"name": "webhook", "port": 443, "protocol": "TCP"}]

    def test_service_port_list_of_other_length_is_replaced(self):
        desired = {"spec": {"ports": [{"port": 443}]}}
        found = {"spec": {"ports": [{"port": 80, "protocol": "TCP"}, {"port": 8080, "protocol": "TCP"}]}}

        merge_service(desired, found)

        assert found["spec"]["ports"] == [{"port": 443}]

    def test_deployment_replicas_are_replaced(self):
        desired = {"spec": {"replicas": 2}}
        found = {"spec": {"replicas": 5}, "status": {"readyReplicas": 5}}

        merge_deployment(desired, found)

        assert found == {"spec": {"replicas": 2}, "status": {"readyReplicas": 5}}

    def test_webhooks_keep_injected_ca_bundle(self):
        desired = {
            "webhooks": [
                {"name": "a.kubevirt.io", "clientConfig": {"service": {"name": "svc"}}},
                {"name": "b.kubevirt.io", "clientConfig": {"service": {"name": "svc"}}},
            ]
        }
        found = {
            "webhooks": [
                {"name": "a.kubevirt.io", "clientConfig": {"caBundle": "Q0E=", "service": {"name": "old"}}},
            ]
        }

        merge_webhooks(desired, found)

        assert found["webhooks"][0]["clientConfig"] == {"caBundle": "Q0E=", "service": {"name": "svc"}}
        assert "caBundle" not in found["webhooks"][1]["clientConfig"]
        assert "caBundle" not in desired["webhooks"][0]["clientConfig"]

    def test_deployment_keeps_defaulted_fields(self):
        desired = {
            "spec": {
                "replicas": 2,
                "template": {"spec": {"containers": [{"name": "webhook", "args": ["-v=2"]}]}},
            }
        }
        found = {
            "spec": {
                "replicas": 1,
                "strategy": {"type": "RollingUpdate"},
                "template": {
                    "spec": {
                        "dnsPolicy": "ClusterFirst",
                        "containers": [
                            {
                                "name": "webhook",
                                "args": ["-v=4"],
                                "terminationMessagePath": "/dev/termination-log",
                            }
                        ],
                    }
                },
            }
        }

        merge_deployment(desired, found)

        assert found["spec"] == {
            "replicas": 2,
            "strategy": {"type": "RollingUpdate"},
            "template": {
                "spec": {
                    "dnsPolicy": "ClusterFirst",
                    "containers": [
                        {
                            "name": "webhook",
                            "args": ["-v=2"],
                            "terminationMessagePath": "/dev/termination-log",
                        }
                    ],
                }
            },
        }

    def test_webhooks_keep_defaulted_fields(self):
        desired = {"webhooks": [{"name": "a.kubevirt.io", "clientConfig": {"service": {"name": "svc"}}}]}
        found = {
            "webhooks": [
                {
                    "name": "a.kubevirt.io",
                    "matchPolicy": "Equivalent",
                    "timeoutSeconds": 10,
                    "clientConfig": {"service": {"name": "svc", "port": 443}},
                }
            ]
        }
        original = copy.deepcopy(found)

        merge_webhooks(desired, found)

        assert found == original

    def test_keep_existing(self):
        found = {"spec": {"finalizers": ["kubernetes"]}}

        keep_existing({"spec": {}}, found)

        assert found == {"spec": {"finalizers": ["kubernetes"]}}

    def test_strip_deprecated_labels(self):
        found = {
            "metadata": {
                "labels": {
                    "os.template.kubevirt.io/fedora33": "true",
                    "flavor.template.kubevirt.io/small": "true",
                    "workload.template.kubevirt.io/server": "true",
                    "template.kubevirt.io/type": "base",
                    "template.kubevirt.io/version": "v0.12.0",
                }
            }
        }

        strip_deprecated_labels({}, found)

        assert found["metadata"]["labels"] == {
            "template.kubevirt.io/type": "base",
            "template.kubevirt.io/version": "v0.12.0",
        }

    def test_strip_deprecated_labels_without_labels(self):
        found = {"metadata": {}}

        strip_deprecated_labels({}, found)

        assert found == {"metadata": {}}


class TestMergeTable:
    """Test cases for the kind to merge function table."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("Namespace", keep_existing),
            ("Role", merge_rules),
            ("ClusterRole", merge_rules),
            ("RoleBinding", merge_binding),
            ("ClusterRoleBinding", merge_binding),
            ("Template", merge_template),
            ("ValidatingWebhookConfiguration", merge_webhooks),
        ],
    )
    def test_lookup(self, kind, expected):
        assert merge_function_for(kind) is expected

    def test_unknown_kind(self):
        with pytest.raises(UnsupportedKindError) as exc_info:
            merge_function_for("Secret")
        assert exc_info.value.kind == "Secret"

    def test_no_generic_default(self):
        assert "ConfigMap" not in MERGE_FUNCTIONS
