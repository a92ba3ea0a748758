"""Tests for client-side event search."""

from conftest import make_event
from uneventful.services.filtering import filter_events, normalize_text, strip_html


def sample_events():
    return [
        make_event("1", summary="César birthday"),
        make_event("2", summary="Dentist", location="Main St. Clinic"),
        make_event("3", summary="Sync", description="<p>Agenda: <b>roadmap</b> &amp; hiring</p>"),
        make_event("4", summary="Lunch"),
    ]


def test_empty_query_is_identity():
    events = sample_events()

    assert filter_events(events, "") == events


def test_accent_insensitive_match():
    result = filter_events(sample_events(), "cesar")

    assert [e.id for e in result] == ["1"]


def test_accented_query_matches_plain_text():
    events = [make_event("1", summary="Cafe meeting")]

    assert [e.id for e in filter_events(events, "Café")] == ["1"]


def test_case_insensitive_match():
    assert [e.id for e in filter_events(sample_events(), "DENTIST")] == ["2"]


def test_matches_location():
    assert [e.id for e in filter_events(sample_events(), "clinic")] == ["2"]


def test_matches_description_text_not_markup():
    events = sample_events()

    assert [e.id for e in filter_events(events, "roadmap & hiring")] == ["3"]
    assert filter_events(events, "<b>") == []


def test_substring_not_tokens():
    """Pure containment: word order and partial words matter."""
    events = sample_events()

    assert [e.id for e in filter_events(events, "irthda")] == ["1"]
    assert filter_events(events, "birthday cesar") == []


def test_result_is_ordered_subset():
    events = sample_events()

    result = filter_events(events, "n")

    assert all(event in events for event in result)
    assert len(set(id(e) for e in result)) == len(result)
    assert [e.id for e in result] == [e.id for e in events if e in result]


def test_events_without_optional_fields():
    events = [make_event("1", summary="")]

    assert filter_events(events, "x") == []


def test_normalize_text():
    assert normalize_text("Crème Brûlée") == "creme brulee"


def test_strip_html():
    assert strip_html("<div>Hello&nbsp;<i>world</i></div>") == "Hello\xa0world"
