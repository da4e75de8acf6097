from datetime import datetime

import pytest

from search_sync_server.indexing.transformers import (
    apply_transformer,
    transform_boolean,
    transform_date,
    transform_geo_point,
    transform_html,
)


class TestDateTransformer:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("20231005", "2023-10-05"),
            ("05/10/2023", "2023-10-05"),
            ("2023-10-05 12:30:00", "2023-10-05T12:30:00"),
            ("2023-10-05T12:30:00Z", "2023-10-05T12:30:00+00:00"),
        ],
    )
    def test_host_formats_normalized(self, raw, expected):
        assert transform_date(raw) == expected

    def test_datetime_passthrough(self):
        assert transform_date(datetime(2023, 1, 2, 3, 4, 5)) == "2023-01-02T03:04:05"

    @pytest.mark.parametrize("raw", [None, "", "not a date"])
    def test_empty_or_garbage_is_none(self, raw):
        assert transform_date(raw) is None


def test_html_is_stripped_and_collapsed():
    raw = "<p>Hello\n <b>world</b></p><ul><li>one</li><li>two</li></ul>"
    assert transform_html(raw) == "Hello world one two"


def test_html_leaves_non_strings_alone():
    assert transform_html(None) is None
    assert transform_html("") == ""


@pytest.mark.parametrize(
    "raw, expected",
    [
        (["red"], True),
        ([], False),
        ("1", True),
        ("0", False),
        ("false", False),
        ("", False),
        (1, True),
        (None, False),
    ],
)
def test_boolean(raw, expected):
    assert transform_boolean(raw) is expected


def test_geo_point_accepts_lng_and_lon():
    assert transform_geo_point({"lat": "51.5", "lng": "-0.12", "address": "x"}) == {
        "lat": 51.5,
        "lon": -0.12,
    }
    assert transform_geo_point({"lat": 1, "lon": 2}) == {"lat": 1.0, "lon": 2.0}


def test_geo_point_incomplete_is_none():
    assert transform_geo_point({"lat": 1}) is None
    assert transform_geo_point("51.5,-0.12") is None
    assert transform_geo_point({"lat": "a", "lng": "b"}) is None


def test_apply_transformer():
    assert apply_transformer(None, "<b>x</b>") == "<b>x</b>"
    assert apply_transformer("html", "<b>x</b>") == "x"
    with pytest.raises(KeyError):
        apply_transformer("unknown", "x")
