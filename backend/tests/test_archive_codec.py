"""
Clinic Tracker Backend — Archive Column Codec Tests
====================================================

What:  Tests for decoding the JSON text stored in daily_archives *_data columns.

What we test:
    ✅ NULL, "", "null" and "[]" decode to [] without being a failure
    ✅ A JSON array decodes as-is
    ✅ Malformed JSON and non-array JSON fall back to [] and report it
    ✅ Every log kind has exactly one archive column
"""

import pytest

from clinic_api.services.archive_service import ARCHIVE_SOURCES, decode_with_fallback
from clinic_api.services.record_service import RECORD_KINDS


class TestDecodeWithFallback:

    @pytest.mark.parametrize("raw", [None, "", "  ", "null", "[]"])
    def test_empty_markers(self, raw):
        assert decode_with_fallback(raw) == ([], True)

    def test_array_passthrough(self):
        records, ok = decode_with_fallback('[{"id": 1, "weight": 72.5}, 3]')
        assert ok is True
        assert records == [{"id": 1, "weight": 72.5}, 3]

    @pytest.mark.parametrize("raw", ["{not json", '[{"id": 1}'])
    def test_malformed_json(self, raw):
        assert decode_with_fallback(raw) == ([], False)

    @pytest.mark.parametrize("raw", ['{"id": 1}', '"text"', "42"])
    def test_non_array_json(self, raw):
        assert decode_with_fallback(raw) == ([], False)


class TestArchiveSources:

    def test_one_column_per_log(self):
        assert {source.kind.name for source in ARCHIVE_SOURCES} == set(RECORD_KINDS)
        assert len({source.column for source in ARCHIVE_SOURCES}) == len(ARCHIVE_SOURCES)
