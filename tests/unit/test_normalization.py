"""Tests for resource quota normalization."""

import pytest
from quota_sync.data.normalization import (
    FALLBACK_USED_KEYS,
    QuotaShapeError,
    fallback_used,
    is_zero_total,
    normalize_quota,
    resource_list_to_strings,
    storage_class_quota_key,
)
from quota_sync.data.quantity import QuantityError

from conftest import resource_quota

HUAWEI_STORAGE_KEY = "huawei-fusionstorage.storageclass.storage.k8s.io/requests.storage"


class TestResourceListToStrings:
    def test_canonicalizes_each_value(self):
        result = resource_list_to_strings({"limits.cpu": "2000m", "limits.memory": "1024Mi"})
        assert result == {"limits.cpu": "2", "limits.memory": "1Gi"}

    def test_passes_canonical_strings_through(self):
        result = resource_list_to_strings({"requests.cpu": "500m", "pods": "10"})
        assert result == {"requests.cpu": "500m", "pods": "10"}

    def test_none_and_empty(self):
        assert resource_list_to_strings(None) == {}
        assert resource_list_to_strings({}) == {}

    def test_numeric_values(self):
        assert resource_list_to_strings({"count/pods": 20}) == {"count/pods": "20"}

    def test_not_a_mapping(self):
        with pytest.raises(QuotaShapeError):
            resource_list_to_strings(["cpu", "4"])

    def test_invalid_quantity(self):
        with pytest.raises(QuantityError):
            resource_list_to_strings({"cpu": "four"})


class TestFallbackUsed:
    def test_default_keys(self):
        used = fallback_used()
        assert used == {
            "requests.cpu": "0",
            "limits.cpu": "0",
            "requests.memory": "0",
            "limits.memory": "0",
            HUAWEI_STORAGE_KEY: "0",
        }

    def test_custom_storage_class(self):
        used = fallback_used("ceph-rbd")
        assert storage_class_quota_key("ceph-rbd") in used
        assert HUAWEI_STORAGE_KEY not in used
        assert len(used) == len(FALLBACK_USED_KEYS) + 1

    def test_returns_fresh_dict(self):
        first = fallback_used()
        first["requests.cpu"] = "9"
        assert fallback_used()["requests.cpu"] == "0"


class TestIsZeroTotal:
    def test_absent(self):
        assert is_zero_total(None) is True
        assert is_zero_total({}) is True

    def test_empty_lists(self):
        assert is_zero_total({"hard": {}, "used": None}) is True
        assert is_zero_total({"hard": {}, "used": {}}) is True

    def test_reported(self):
        assert is_zero_total({"hard": {"cpu": "1"}}) is False
        assert is_zero_total({"used": {"cpu": "0"}}) is False


class TestNormalizeQuota:
    def test_fallback_when_status_missing(self, pending_quota_body):
        hard, used = normalize_quota(pending_quota_body)
        assert hard == {"requests.cpu": "2", "limits.cpu": "4", "requests.memory": "4Gi"}
        assert used == fallback_used()

    def test_fallback_when_total_is_null(self):
        body = resource_quota("ws", {"limits.cpu": "1"})
        body["status"] = {"total": None}
        hard, used = normalize_quota(body)
        assert hard == {"limits.cpu": "1"}
        assert set(used) == set(fallback_used())
        assert all(v == "0" for v in used.values())

    def test_fallback_when_total_has_empty_maps(self):
        body = resource_quota("ws", {"limits.cpu": "1"}, total={"hard": {}, "used": {}})
        hard, used = normalize_quota(body)
        assert hard == {"limits.cpu": "1"}
        assert used == fallback_used()

    def test_fallback_uses_configured_storage_class(self, pending_quota_body):
        _, used = normalize_quota(pending_quota_body, storage_class="local-path")
        assert "local-path.storageclass.storage.k8s.io/requests.storage" in used

    def test_live_total(self, live_quota_body):
        hard, used = normalize_quota(live_quota_body)
        assert hard == {"limits.cpu": "8", "limits.memory": "16Gi"}
        assert used == {"limits.cpu": "1500m", "limits.memory": "2Gi"}

    def test_live_total_ignores_spec(self):
        body = resource_quota(
            "ws",
            {"limits.cpu": "100"},
            total={"hard": {"limits.cpu": "4"}, "used": {"limits.cpu": "1"}},
        )
        hard, used = normalize_quota(body)
        assert hard == {"limits.cpu": "4"}
        assert used == {"limits.cpu": "1"}

    def test_live_total_without_used(self):
        body = resource_quota("ws", {}, total={"hard": {"pods": "10"}})
        hard, used = normalize_quota(body)
        assert hard == {"pods": "10"}
        assert used == {}

    def test_missing_spec_in_fallback(self):
        hard, used = normalize_quota({"metadata": {"name": "ws"}})
        assert hard == {}
        assert used == fallback_used()

    def test_wrong_section_type(self):
        with pytest.raises(QuotaShapeError):
            normalize_quota({"spec": "oops"})
        with pytest.raises(QuotaShapeError):
            normalize_quota({"status": {"total": ["hard"]}})
