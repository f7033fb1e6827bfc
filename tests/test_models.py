# tests/test_models.py

import pytest

from namefinder.models import CharSpan, DecodeRequest, Tag, TagKind, TokenSpan


def test_span_rejects_empty_interval():
    with pytest.raises(ValueError):
        CharSpan(5, 5)
    with pytest.raises(ValueError):
        TokenSpan(3, 1)


def test_contains_and_overlaps():
    outer = CharSpan(0, 12)
    assert outer.contains(CharSpan(7, 12))
    assert not outer.contains(CharSpan(7, 13))
    assert outer.overlaps(CharSpan(11, 20))
    assert not outer.overlaps(CharSpan(12, 20))


def test_char_and_token_spans_do_not_mix():
    with pytest.raises(TypeError):
        CharSpan(0, 2).overlaps(TokenSpan(0, 2))
    with pytest.raises(TypeError):
        TokenSpan(0, 2).contains(CharSpan(0, 1))


def test_covered_text():
    assert CharSpan(7, 12).covered_text("Barack Obama met") == "Obama"


def test_tag_string_forms():
    assert str(Tag.outside()) == "OUTSIDE"
    assert str(Tag.start("PERSON")) == "START-PERSON"
    assert Tag.parse("CONTINUE-PERSON") == Tag.cont("PERSON")
    assert Tag.parse("OUTSIDE").kind is TagKind.OUTSIDE
    with pytest.raises(ValueError):
        Tag.parse("START")
    with pytest.raises(ValueError):
        Tag(TagKind.START)


def test_request_is_a_snapshot():
    tokens = [[0, 6], [7, 12]]
    request = DecodeRequest(text="Barack Obama", sentences=[(0, 12)], tokens=tokens)
    tokens.append([12, 13])
    tokens[0][1] = 3
    assert request.tokens == ((0, 6), (7, 12))


def test_request_keeps_entries_it_cannot_copy():
    request = DecodeRequest(
        text="Barack Obama", sentences=[(0, 12)], tokens=[(0, 6), 7], verified=[5]
    )
    assert request.tokens == ((0, 6), 7)
    assert request.verified == (5,)
