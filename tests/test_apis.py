"""
tests/test_apis.py
Operation listing, grouping and counting helpers.
"""

from __future__ import annotations

from apitypes.apis import (
    UNTAGGED,
    count_apis_by_tag,
    extract_all_apis,
    format_api_display,
    group_apis_by_tag,
)
from apitypes.models import ApiInfo


class TestApiListing:
    def test_extract_all_apis(self, description):
        apis = extract_all_apis(description)
        assert len(apis) == description.operation_count
        assert apis[0].method == "post"
        assert apis[0].path == "/pet"
        assert apis[0].tags == ["pet"]

    def test_group_by_tag_first_seen_order(self, description):
        groups = group_apis_by_tag(extract_all_apis(description))
        assert list(groups) == ["pet", "store", UNTAGGED]
        assert [a.operation_id for a in groups["store"]] == ["getInventory", "placeOrder"]
        assert [a.operation_id for a in groups[UNTAGGED]] == ["get_owners_{ownerId}"]

    def test_multi_tag_operation_in_each_group(self):
        api = ApiInfo(method="get", path="/a", operation_id="a", tags=["x", "y"])
        groups = group_apis_by_tag([api])
        assert groups["x"] == [api]
        assert groups["y"] == [api]

    def test_count_by_tag(self, description):
        assert count_apis_by_tag(description) == [
            ("pet", 5, "Everything about your pets"),
            ("store", 2, "Access to petstore orders"),
            (UNTAGGED, 1, None),
        ]

    def test_format_api_display(self):
        api = ApiInfo(method="delete", path="/pet/{petId}", operation_id="d", summary="Remove")
        assert format_api_display(api) == "DELETE  /pet/{petId} - Remove"

    def test_format_api_display_without_summary(self):
        api = ApiInfo(method="options", path="/", operation_id="o")
        assert format_api_display(api) == "OPTIONS /"
