"""
Unit tests for the details column envelope.
"""

from tasktrail.schemas.activity import (
    Impact,
    ImpactType,
    PlainDetails,
    StructuredDetails,
    details_impact,
    details_text,
    parse_details,
    serialize_details,
)


class TestSerializeDetails:
    """Tests for writing the details column."""

    def test_plain_text_is_stored_as_is(self):
        assert serialize_details("Task deleted") == "Task deleted"

    def test_none_stays_none(self):
        assert serialize_details(None) is None

    def test_impact_produces_compact_json(self):
        """The envelope has no whitespace and keeps key order text, impact."""
        impact = Impact(type=ImpactType.LATE, label="2 Days Late")

        stored = serialize_details("Status updated to COMPLETED", impact)

        assert stored == (
            '{"text":"Status updated to COMPLETED",'
            '"impact":{"type":"LATE","label":"2 Days Late"}}'
        )

    def test_non_ascii_text_is_kept_readable(self):
        impact = Impact(type=ImpactType.ON_TIME, label="On Time")

        assert "Café" in serialize_details("Café menu", impact)


class TestParseDetails:
    """Tests for reading the details column back."""

    def test_none_is_empty_plain(self):
        parsed = parse_details(None)

        assert isinstance(parsed, PlainDetails)
        assert parsed.text == ""

    def test_plain_string(self):
        parsed = parse_details("Updated title")

        assert isinstance(parsed, PlainDetails)
        assert parsed.text == "Updated title"

    def test_round_trip_with_impact(self):
        """Details written with impact parse back to the same text and impact."""
        impact = Impact(type=ImpactType.ON_TIME, label="On Time")

        parsed = parse_details(serialize_details("Status updated to COMPLETED", impact))

        assert isinstance(parsed, StructuredDetails)
        assert parsed.text == "Status updated to COMPLETED"
        assert parsed.impact == impact

    def test_broken_json_falls_back_to_raw_text(self):
        """A string that looks like JSON but is not stays displayable."""
        raw = "{not really json"

        parsed = parse_details(raw)

        assert isinstance(parsed, PlainDetails)
        assert parsed.text == raw

    def test_missing_text_reads_no_details(self):
        parsed = parse_details('{"impact":{"type":"LATE","label":"1 Day Late"}}')

        assert parsed.text == "No details"
        assert parsed.impact.type == ImpactType.LATE

    def test_null_impact_is_plain(self):
        parsed = parse_details('{"text":"Hello","impact":null}')

        assert isinstance(parsed, PlainDetails)
        assert parsed.text == "Hello"

    def test_unknown_impact_type_is_plain(self):
        parsed = parse_details('{"text":"Hello","impact":{"type":"SOMEDAY","label":"?"}}')

        assert isinstance(parsed, PlainDetails)
        assert parsed.text == "Hello"

    def test_helpers(self):
        raw = serialize_details("Done", Impact(type=ImpactType.LATE, label="3 Days Late"))

        assert details_text(raw) == "Done"
        assert details_impact(raw).label == "3 Days Late"
        assert details_impact("Done") is None
