# namefinder/segment.py

from __future__ import annotations

from typing import Dict, List, Tuple

import spacy
from spacy.language import Language

_BLANK: Dict[str, Language] = {}


def _get_blank(lang: str) -> Language:
    if lang not in _BLANK:
        nlp = spacy.blank(lang)
        nlp.add_pipe("sentencizer")
        _BLANK[lang] = nlp
    return _BLANK[lang]


def segment(text: str, lang: str = "en") -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """
    Split raw text into sentence and token character spans.

    Uses spaCy's rule-based tokenizer and sentencizer; whitespace tokens are
    dropped.
    """
    doc = _get_blank(lang)(text)

    sentences: List[Tuple[int, int]] = []
    for sent in doc.sents:
        words = [t for t in sent if not t.is_space]
        if words:
            sentences.append((words[0].idx, words[-1].idx + len(words[-1].text)))

    tokens = [(t.idx, t.idx + len(t.text)) for t in doc if not t.is_space]
    return sentences, tokens
