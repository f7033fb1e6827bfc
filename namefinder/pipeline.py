# namefinder/pipeline.py

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Set

from .config import NameFinderConfig
from .constraints import build_constraint_map, sentence_tokens, validate_spans
from .errors import DecodeError, DecodeUnavailable, ModelLoadFailure
from .models import (
    STATUS_CANCELLED,
    STATUS_LOAD_FAILURE,
    STATUS_OK,
    CharSpan,
    DecodedEntity,
    DecodeRequest,
    DecodeResult,
    Issue,
)
from .reconstruct import reconstruct_entities
from .tagger import Tagger, load_tagger
from .validator import make_validator

logger = logging.getLogger(__name__)

TaggerLoader = Callable[[Optional[str], NameFinderConfig], Tagger]


def load_failure_result(error: ModelLoadFailure) -> DecodeResult:
    logger.error("Name finder model unavailable: %s", error)
    return DecodeResult(
        status=STATUS_LOAD_FAILURE,
        issues=(Issue(kind="load_failure", message=str(error)),),
    )


def _reject_verified(issues: List[Issue], name: CharSpan, msg: str) -> None:
    logger.warning("Rejected verified name [%d, %d): %s", name.start, name.end, msg)
    issues.append(
        Issue(kind="invalid_verified", message=msg, start=name.start, end=name.end)
    )


def decode_document(
    request: DecodeRequest,
    tagger: Optional[Tagger],
    config: NameFinderConfig,
    cancel: Optional[threading.Event] = None,
) -> DecodeResult:
    """
    Propose entities for every sentence of the request, honoring verified names.

    Malformed spans and sentences the tagger cannot decode are reported as
    issues and skipped; a missing tagger aborts the whole document. When
    cancelled, the entities of the sentences finished so far are returned.
    """
    if tagger is None:
        return load_failure_result(DecodeUnavailable("No tagger is loaded"))

    text = request.text
    sentences, issues = validate_spans(request.sentences, len(text), "sentence")
    tokens, token_issues = validate_spans(request.tokens, len(text), "token")
    verified, verified_issues = validate_spans(
        request.verified,
        len(text),
        "verified",
        default_label=config.default_label,
        allow_overlap=True,
    )
    issues += token_issues + verified_issues

    known_types = set(tagger.types)
    accepted: List[CharSpan] = []
    for name in verified:
        label = config.map_label(name.label)
        if label is None or label not in known_types:
            _reject_verified(issues, name, f"Unknown entity type {name.label!r}")
            continue
        accepted.append(CharSpan(name.start, name.end, label))
    verified = accepted
    clashing: Set[CharSpan] = set()

    tagger.clear_adaptive_state()

    entities: List[DecodedEntity] = []
    for sentence in sentences:
        if cancel is not None and cancel.is_set():
            logger.info("Decode cancelled after %d entities", len(entities))
            return DecodeResult(tuple(entities), STATUS_CANCELLED, tuple(issues))

        sent_tokens = sentence_tokens(sentence, tokens)
        if not sent_tokens:
            continue

        token_strings = [t.covered_text(text) for t in sent_tokens]
        constraints, rejected = build_constraint_map(sent_tokens, verified)
        for name in rejected:
            if name not in clashing:
                clashing.add(name)
                _reject_verified(issues, name, "Overlaps an earlier verified name")
        validator = make_validator(constraints)

        try:
            spans, probs = tagger.decode(token_strings, validator)
        except DecodeError as e:
            logger.warning(
                "Skipping sentence [%d, %d): %s", sentence.start, sentence.end, e
            )
            issues.append(
                Issue(
                    kind="decode_error",
                    message=str(e),
                    start=sentence.start,
                    end=sentence.end,
                )
            )
            continue

        entities += reconstruct_entities(text, sent_tokens, spans, probs, constraints)

    logger.debug(
        "Decoded %d sentences, %d entities, %d issues",
        len(sentences),
        len(entities),
        len(issues),
    )
    return DecodeResult(tuple(entities), STATUS_OK, tuple(issues))


def find_names(
    request: DecodeRequest,
    config: Optional[NameFinderConfig] = None,
    loader: TaggerLoader = load_tagger,
    cancel: Optional[threading.Event] = None,
) -> DecodeResult:
    """Load the tagger for the request and decode the whole document."""
    config = config or NameFinderConfig()
    try:
        tagger = loader(request.model_path, config)
    except ModelLoadFailure as e:
        return load_failure_result(e)
    return decode_document(request, tagger, config, cancel=cancel)
