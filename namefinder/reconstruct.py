# namefinder/reconstruct.py

from __future__ import annotations

from typing import List, Mapping, Sequence

from .models import CharSpan, DecodedEntity, Tag, TokenSpan


def reconstruct_entities(
    text: str,
    tokens: Sequence[CharSpan],
    spans: Sequence[TokenSpan],
    probs: Sequence[float],
    constraints: Mapping[int, Tag],
) -> List[DecodedEntity]:
    """
    Map decoded token spans of one sentence back to character offsets.

    An entity is marked verified only when every one of its tokens was fixed
    by a verified name.
    """
    entities: List[DecodedEntity] = []
    for span, prob in zip(spans, probs):
        begin = tokens[span.start].start
        end = tokens[span.end - 1].end
        verified = all(i in constraints for i in range(span.start, span.end))
        entities.append(
            DecodedEntity(
                start=begin,
                end=end,
                text=text[begin:end],
                label=span.label,
                probability=prob,
                verified=verified,
            )
        )
    return entities
