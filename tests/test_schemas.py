"""Unit tests for schema helpers that read legacy JSON columns."""

from datetime import datetime, timezone

import pytest

from blogcms.schemas.asset import Asset
from blogcms.schemas.common import parse_json_field


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('["seo", "python"]', ["seo", "python"]),
        ('{"twitter": "@ada"}', {"twitter": "@ada"}),
        (["already", "parsed"], ["already", "parsed"]),
        ("   ", None),
        (None, None),
    ],
)
def test_parse_json_field(raw, expected):
    assert parse_json_field(raw) == expected


@pytest.mark.parametrize("raw", ["not json", "[1, 2", "{'single': 'quotes'}"])
def test_malformed_json_is_treated_as_empty(raw):
    assert parse_json_field(raw) is None


def test_malformed_legacy_tags_serialize_as_empty_list():
    asset = Asset.model_validate(
        {
            "id": 1,
            "filename": "a.png",
            "original_name": "a.png",
            "path": "uploads/a.png",
            "url": "/uploads/a.png",
            "mimetype": "image/png",
            "size": 10,
            "user_id": 1,
            "tags": "[broken",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
    )
    assert asset.tags == []
