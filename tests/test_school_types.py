"""Tests for institution type detection."""

from snowday.school_types import has_specific_type, type_signature


def test_signature_is_sorted():
    assert type_signature("Example Christian Academy") == "academy,christian"


def test_signature_ignores_case_and_word_order():
    assert type_signature("ACADEMY christian example") == type_signature("Example Christian Academy")


def test_single_type():
    assert type_signature("St. Mary Catholic School") == "catholic"
    assert type_signature("Example Public Schools") == "public"


def test_academy_misspelling():
    assert type_signature("Example Acdmy") == "academy"


def test_no_type_detected():
    assert type_signature("Example Schools") == ""
    assert type_signature("") == ""


def test_specific_types():
    assert has_specific_type("public") is False
    assert has_specific_type("") is False
    assert has_specific_type("academy,public") is True
    assert has_specific_type("charter") is True
