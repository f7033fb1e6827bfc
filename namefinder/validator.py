# namefinder/validator.py

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from .models import Tag, TagKind

Validator = Callable[[int, Sequence[Tag], Tag], bool]


def continuity_ok(i: int, history: Sequence[Tag], candidate: Tag) -> bool:
    """CONTINUE-T may only follow START-T or CONTINUE-T."""
    if candidate.kind is not TagKind.CONTINUE:
        return True
    if i == 0:
        return False
    prev = history[i - 1]
    return not prev.is_outside and prev.type == candidate.type


def make_validator(constraints: Mapping[int, Tag]) -> Validator:
    """
    Build the step predicate handed to the tagger for one sentence.

    The map is copied, so the returned validator cannot see later changes to it
    and one sentence's constraints never reach another sentence. A token right
    after a constrained one may not continue it, so decoded entities end where
    verified names end.
    """
    fixed = dict(constraints)

    def valid(i: int, history: Sequence[Tag], candidate: Tag) -> bool:
        ok = continuity_ok(i, history, candidate)
        required = fixed.get(i)
        if ok and required is not None:
            return candidate == required
        if ok and candidate.kind is TagKind.CONTINUE and (i - 1) in fixed:
            return False
        return ok

    return valid
