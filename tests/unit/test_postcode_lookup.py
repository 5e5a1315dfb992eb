"""Unit tests for the postcode lookup collaborator (HTTP mocked)."""

from unittest.mock import MagicMock

import pytest
import requests

from core.exceptions import PostcodeLookupError
from vector_io.postcode_lookup import (
    lookup_postcode,
    lookup_postcodes,
    normalize_postcode,
)


def _response(status_code: int, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


def _found(postcode: str, lon: float, lat: float, lsoa: str = "E01000001") -> MagicMock:
    return _response(200, {
        "status": 200,
        "result": {
            "postcode": postcode,
            "longitude": lon,
            "latitude": lat,
            "codes": {"lsoa": lsoa, "admin_district": "E09000033"},
        },
    })


NOT_FOUND = _response(404, {"status": 404, "error": "Postcode not found"})


class TestNormalizePostcode:
    @pytest.mark.parametrize(
        "raw,expected",
        [("sw1a1aa", "SW1A 1AA"), (" SW1A  1AA ", "SW1A 1AA"), ("e1 6an", "E1 6AN"), ("W1", "W1")],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_postcode(raw) == expected


class TestLookupPostcode:
    def test_found_returns_single_point_feature(self):
        session = MagicMock()
        session.get.return_value = _found("SW1A 1AA", -0.141588, 51.501009)

        result = lookup_postcode("sw1a1aa", session=session)

        assert len(result) == 1
        assert result.crs.to_epsg() == 4326
        row = result.iloc[0]
        assert row["postcode"] == "SW1A 1AA"
        assert row["lsoa_code"] == "E01000001"
        assert row["district_code"] == "E09000033"
        assert row.geometry.x == pytest.approx(-0.141588)
        assert row.geometry.y == pytest.approx(51.501009)

    def test_request_url_and_timeout(self):
        session = MagicMock()
        session.get.return_value = _found("E1 6AN", -0.07, 51.52)

        lookup_postcode("E1 6AN", session=session, base_url="https://example.test/", timeout=5)

        session.get.assert_called_once_with("https://example.test/postcodes/E1%206AN", timeout=5)

    def test_not_found_returns_empty(self):
        session = MagicMock()
        session.get.return_value = NOT_FOUND

        result = lookup_postcode("ZZ9 9ZZ", session=session)

        assert result.empty
        assert {"postcode", "lsoa_code", "district_code"} <= set(result.columns)

    def test_missing_coordinates_returns_empty(self):
        session = MagicMock()
        session.get.return_value = _response(200, {
            "status": 200,
            "result": {"postcode": "GIR 0AA", "longitude": None, "latitude": None, "codes": {}},
        })
        assert lookup_postcode("GIR 0AA", session=session).empty

    def test_server_error_raises(self):
        session = MagicMock()
        session.get.return_value = _response(500)
        with pytest.raises(PostcodeLookupError, match="SW1A 1AA"):
            lookup_postcode("SW1A 1AA", session=session)

    def test_timeout_raises(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.Timeout()
        with pytest.raises(PostcodeLookupError, match="timed out"):
            lookup_postcode("SW1A 1AA", session=session)

    def test_connection_error_raises(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(PostcodeLookupError):
            lookup_postcode("SW1A 1AA", session=session)


class TestLookupPostcodes:
    def test_concatenates_in_input_order(self):
        session = MagicMock()
        session.get.side_effect = [
            _found("E1 6AN", -0.07, 51.52),
            NOT_FOUND,
            _found("SW1A 1AA", -0.14, 51.50),
        ]

        result = lookup_postcodes(["E1 6AN", "ZZ9 9ZZ", "SW1A 1AA"], session=session)

        assert result["postcode"].tolist() == ["E1 6AN", "SW1A 1AA"]
        assert result.index.tolist() == [0, 1]
        assert result.crs.to_epsg() == 4326
        assert result.attrs["unresolved"] == ["ZZ9 9ZZ"]
        assert session.get.call_count == 3

    def test_nothing_resolved(self):
        session = MagicMock()
        session.get.return_value = NOT_FOUND

        result = lookup_postcodes(["ZZ9 9ZZ"], session=session)

        assert result.empty
        assert result.attrs["unresolved"] == ["ZZ9 9ZZ"]

    def test_caller_session_not_closed(self):
        session = MagicMock()
        session.get.return_value = NOT_FOUND
        lookup_postcodes(["ZZ9 9ZZ"], session=session)
        session.close.assert_not_called()
