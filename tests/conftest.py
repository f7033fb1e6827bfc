# tests/conftest.py

import pytest
import spacy

from namefinder.config import NameFinderConfig
from namefinder.models import DecodeRequest
from namefinder.tagger import SpacyTagger

PATTERNS = [
    {"label": "PERSON", "pattern": [{"LOWER": "xi"}, {"LOWER": "jinping"}]},
    {"label": "PERSON", "pattern": [{"LOWER": "michelle"}, {"LOWER": "obama"}]},
    {"label": "GPE", "pattern": [{"LOWER": "beijing"}]},
]

TEXT = "Barack Obama met Xi Jinping."
TOKENS = [(0, 6), (7, 12), (13, 16), (17, 19), (20, 27), (27, 28)]
SENTENCES = [(0, 28)]

TWO_SENTENCES = "Barack Obama met Xi Jinping. Obama met Xi Jinping."
TWO_SENTENCE_TOKENS = TOKENS + [(29, 34), (35, 38), (39, 41), (42, 49), (49, 50)]


def build_tagger(config=None, patterns=PATTERNS):
    nlp = spacy.blank("en")
    ruler = nlp.add_pipe("entity_ruler")
    ruler.add_patterns(patterns)
    return SpacyTagger(nlp, config or NameFinderConfig())


@pytest.fixture
def config():
    return NameFinderConfig()


@pytest.fixture
def tagger(config):
    return build_tagger(config)


@pytest.fixture
def obama_request():
    return DecodeRequest(
        text=TEXT,
        sentences=SENTENCES,
        tokens=TOKENS,
        verified=[(0, 12)],
    )
