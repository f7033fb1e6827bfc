# tests/test_tagger.py

import pytest

from namefinder.config import NameFinderConfig
from namefinder.errors import DecodeError, ModelLoadFailure
from namefinder.models import Tag, TagKind
from namefinder.tagger import load_tagger, tags_to_spans
from namefinder.validator import continuity_ok, make_validator

from conftest import build_tagger

WORDS = ["Barack", "Obama", "met", "Xi", "Jinping", "in", "Beijing", "."]


def _assert_continuity(tags):
    for i, tag in enumerate(tags):
        assert continuity_ok(i, tags, tag), f"{tag} at {i} in {[str(t) for t in tags]}"


def test_types_come_from_pipeline_and_config(tagger):
    assert set(tagger.types) == {"PERSON", "GPE"}
    assert tagger.outcomes[0] == Tag.outside()


def test_label_filter_limits_types():
    tagger = build_tagger(NameFinderConfig(labels=["PERSON"]))
    assert tagger.types == ("PERSON",)
    tags, _ = tagger.best_sequence(WORDS, make_validator({}))
    assert tags[6] == Tag.outside()


def test_unconstrained_decode_follows_pipeline(tagger):
    spans, probs = tagger.decode(WORDS, make_validator({}))
    assert [(s.start, s.end, s.label) for s in spans] == [
        (3, 5, "PERSON"),
        (6, 7, "GPE"),
    ]
    assert all(0.0 < p <= 1.0 for p in probs)


def test_constraints_override_pipeline(tagger):
    constraints = {0: Tag.start("PERSON"), 1: Tag.cont("PERSON"), 6: Tag.outside()}
    tags, probs = tagger.best_sequence(WORDS, make_validator(constraints))

    for i, tag in constraints.items():
        assert tags[i] == tag
    _assert_continuity(tags)
    assert len(probs) == len(WORDS)


def test_forced_start_inside_pipeline_entity_keeps_continuity(tagger):
    # force "Jinping" to start its own entity; "Xi" may not continue into it
    tags, _ = tagger.best_sequence(WORDS, make_validator({4: Tag.start("GPE")}))
    assert tags[4] == Tag.start("GPE")
    _assert_continuity(tags)


def test_impossible_constraint_raises(tagger):
    with pytest.raises(DecodeError):
        tagger.best_sequence(WORDS, make_validator({2: Tag.start("ORG")}))


def test_empty_sentence(tagger):
    assert tagger.decode([], make_validator({})) == ([], [])


def test_adaptive_state_is_cleared(tagger):
    tagger.decode(["Xi", "Jinping", "."], make_validator({}))
    _, boosted = tagger.best_sequence(["Jinping"], make_validator({}))
    assert boosted[0] < 0.85

    tagger.clear_adaptive_state()
    _, plain = tagger.best_sequence(["Jinping"], make_validator({}))
    assert plain[0] == pytest.approx(0.85)


def test_tags_to_spans_averages_probabilities():
    tags = [Tag.start("PERSON"), Tag.cont("PERSON"), Tag.outside(), Tag.start("GPE")]
    spans, confs = tags_to_spans(tags, [0.5, 0.7, 0.9, 0.4])
    assert [(s.start, s.end, s.label) for s in spans] == [(0, 2, "PERSON"), (3, 4, "GPE")]
    assert confs == pytest.approx([0.6, 0.4])


def test_adjacent_starts_are_separate_spans():
    tags = [Tag.start("PERSON"), Tag.start("PERSON"), Tag.cont("PERSON")]
    spans, _ = tags_to_spans(tags, [1.0, 1.0, 1.0])
    assert [(s.start, s.end) for s in spans] == [(0, 1), (1, 3)]
    assert all(t.kind is not TagKind.OUTSIDE for t in tags)


def test_missing_model_is_a_load_failure():
    with pytest.raises(ModelLoadFailure):
        load_tagger("no_such_spacy_model_xyz", NameFinderConfig())
