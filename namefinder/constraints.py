# namefinder/constraints.py

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidSpanInput
from .models import CharSpan, ConstraintMap, Issue, Span, Tag

logger = logging.getLogger(__name__)


def _to_char_span(
    raw, text_length: int, default_label: Optional[str]
) -> CharSpan:
    if isinstance(raw, Span):
        start, end, label = raw.start, raw.end, raw.label
    elif len(raw) == 2:
        (start, end), label = raw, None
    elif len(raw) == 3:
        start, end, label = raw
    else:
        raise InvalidSpanInput(f"Expected (start, end[, label]), got {raw!r}")

    if not isinstance(start, int) or not isinstance(end, int):
        raise InvalidSpanInput(f"Offsets must be integers: {raw!r}")
    if start < 0 or start >= end:
        raise InvalidSpanInput(f"Invalid span [{start}, {end})")
    if end > text_length:
        raise InvalidSpanInput(
            f"Span [{start}, {end}) exceeds text length {text_length}"
        )
    return CharSpan(start, end, label or default_label)


def validate_spans(
    raw_spans: Iterable,
    text_length: int,
    kind: str,
    default_label: Optional[str] = None,
    allow_overlap: bool = False,
) -> Tuple[List[CharSpan], List[Issue]]:
    """
    Turn raw (start, end[, label]) entries into character spans sorted by start.

    Malformed entries are rejected one by one and reported as issues; the
    remaining spans are still returned. Sentences and tokens must not overlap
    each other, verified names may.
    """
    spans: List[CharSpan] = []
    issues: List[Issue] = []

    for raw in raw_spans:
        try:
            spans.append(_to_char_span(raw, text_length, default_label))
        except (InvalidSpanInput, TypeError, ValueError) as e:
            logger.warning("Rejected %s span %r: %s", kind, raw, e)
            issues.append(Issue(kind=f"invalid_{kind}", message=str(e)))

    spans.sort(key=lambda s: (s.start, s.end))
    if allow_overlap:
        return spans, issues

    result: List[CharSpan] = []
    for span in spans:
        if result and result[-1].overlaps(span):
            msg = f"{kind} [{span.start}, {span.end}) overlaps a previous {kind}"
            logger.warning("Rejected %s", msg)
            issues.append(
                Issue(kind=f"invalid_{kind}", message=msg, start=span.start, end=span.end)
            )
            continue
        result.append(span)
    return result, issues


def sentence_tokens(sentence: CharSpan, tokens: Sequence[CharSpan]) -> List[CharSpan]:
    return [t for t in tokens if sentence.contains(t)]


def build_constraint_map(
    tokens: Sequence[CharSpan], verified: Sequence[CharSpan]
) -> Tuple[ConstraintMap, List[CharSpan]]:
    """
    Map token indices of one sentence to the tag a verified name forces on them.

    A token counts as part of a verified name as soon as they overlap, so a name
    ending inside a token is widened to the full token. A name that shares a
    token with an earlier verified name is not applied and is returned in the
    rejected list; the earlier name keeps its tokens.
    """
    constraints: ConstraintMap = {}
    rejected: List[CharSpan] = []
    if not tokens:
        return constraints, rejected

    extent = CharSpan(tokens[0].start, tokens[-1].end)

    for name in sorted(verified, key=lambda s: (s.start, s.end)):
        if not extent.overlaps(name):
            continue

        covered = [i for i, token in enumerate(tokens) if name.overlaps(token)]
        if any(i in constraints for i in covered):
            rejected.append(name)
            continue

        for n, i in enumerate(covered):
            constraints[i] = Tag.start(name.label) if n == 0 else Tag.cont(name.label)

    return constraints, rejected
