# namefinder/tagger.py

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from .config import NameFinderConfig
from .errors import DecodeError, ModelLoadFailure
from .models import Tag, TagKind, TokenSpan
from .validator import Validator

logger = logging.getLogger(__name__)

# Pipeline components whose labels are entity types
ENTITY_PIPES = ("ner", "entity_ruler")


class Tagger(Protocol):
    """Sequence tagger that accepts a step validator while decoding."""

    @property
    def types(self) -> Tuple[str, ...]:
        ...

    def decode(
        self, tokens: Sequence[str], validator: Validator
    ) -> Tuple[List[TokenSpan], List[float]]:
        ...

    def clear_adaptive_state(self) -> None:
        ...


def load_tagger(model_path: Optional[str], config: NameFinderConfig) -> "SpacyTagger":
    """Load a spaCy pipeline by package name or directory and wrap it."""
    path = model_path or config.model
    logger.info("Loading tagger model %s", path)
    try:
        nlp = spacy.load(path)
    except (OSError, ValueError) as e:
        raise ModelLoadFailure(f"Cannot load model {path!r}: {e}") from e
    return SpacyTagger(nlp, config)


def tags_to_spans(
    tags: Sequence[Tag], probs: Sequence[float]
) -> Tuple[List[TokenSpan], List[float]]:
    """Group a tag sequence into entity token spans; confidence is the mean tag probability."""
    spans: List[TokenSpan] = []
    confs: List[float] = []
    begin: Optional[int] = None

    def close(end: int) -> None:
        spans.append(TokenSpan(begin, end, tags[begin].type))
        confs.append(sum(probs[begin:end]) / (end - begin))

    for i, tag in enumerate(tags):
        if (
            tag.kind is TagKind.CONTINUE
            and begin is not None
            and tags[begin].type == tag.type
        ):
            continue
        if begin is not None:
            close(i)
            begin = None
        if not tag.is_outside:
            begin = i

    if begin is not None:
        close(len(tags))
    return spans, confs


class SpacyTagger:
    """
    Beam-search tagger on top of a spaCy pipeline.

    The pipeline's own entity annotation gives each token a preferred tag;
    the beam search then picks the most probable sequence the validator accepts.
    spaCy doesn't expose per-token entity probabilities, so the preferred tag
    gets a fixed confidence and the other outcomes share the rest.
    """

    def __init__(self, nlp: Language, config: NameFinderConfig):
        self._nlp = nlp
        self._config = config

        types: List[str] = []
        for pipe in ENTITY_PIPES:
            for label in nlp.pipe_labels.get(pipe, []):
                mapped = config.map_label(label)
                if mapped is not None and mapped not in types:
                    types.append(mapped)
        # configured types stay decodable even if the pipeline never predicts them
        for label in list(config.labels) + [config.default_label]:
            if label not in types:
                types.append(label)
        self._types = tuple(types)

        self._outcomes: List[Tag] = [Tag.outside()]
        for ent_type in self._types:
            self._outcomes += [Tag.start(ent_type), Tag.cont(ent_type)]

        # token string -> entity type it was decoded with earlier in the document
        self._adaptive: Dict[str, str] = {}

    @property
    def types(self) -> Tuple[str, ...]:
        return self._types

    @property
    def outcomes(self) -> List[Tag]:
        return list(self._outcomes)

    def clear_adaptive_state(self) -> None:
        self._adaptive.clear()

    def _predict(self, tokens: Sequence[str]) -> List[Tag]:
        doc = Doc(self._nlp.vocab, words=list(tokens))
        for _, proc in self._nlp.pipeline:
            doc = proc(doc)

        predicted: List[Tag] = []
        for tok in doc:
            ent_type = self._config.map_label(tok.ent_type_) if tok.ent_type_ else None
            if ent_type is None or ent_type not in self._types:
                predicted.append(Tag.outside())
            elif tok.ent_iob_ == "B":
                predicted.append(Tag.start(ent_type))
            elif tok.ent_iob_ == "I":
                predicted.append(Tag.cont(ent_type))
            else:
                predicted.append(Tag.outside())
        return predicted

    def _distribution(self, token: str, preferred: Tag) -> List[Tuple[Tag, float]]:
        n = len(self._outcomes)
        if n == 1:
            return [(self._outcomes[0], 1.0)]

        base = self._config.base_conf
        rest = (1.0 - base) / (n - 1)
        weights = {o: (base if o == preferred else rest) for o in self._outcomes}

        ent_type = self._adaptive.get(token)
        if ent_type is not None and ent_type in self._types:
            weights[Tag.start(ent_type)] += self._config.adaptive_weight
            weights[Tag.cont(ent_type)] += self._config.adaptive_weight

        total = sum(weights.values())
        return [(o, weights[o] / total) for o in self._outcomes]

    def best_sequence(
        self, tokens: Sequence[str], validator: Validator
    ) -> Tuple[List[Tag], List[float]]:
        """Return the best accepted tag sequence and the probability of each tag."""
        if not tokens:
            return [], []

        preferred = self._predict(tokens)
        dists = [self._distribution(t, p) for t, p in zip(tokens, preferred)]

        # (log score, tags, probs)
        beam: List[Tuple[float, List[Tag], List[float]]] = [(0.0, [], [])]
        for i, dist in enumerate(dists):
            candidates = []
            for score, tags, probs in beam:
                for tag, p in dist:
                    if p <= 0.0 or not validator(i, tags, tag):
                        continue
                    candidates.append((score + math.log(p), tags + [tag], probs + [p]))

            if not candidates:
                raise DecodeError(
                    f"No valid outcome for token {i} ({tokens[i]!r})"
                )
            # stable sort keeps outcome order on ties
            candidates.sort(key=lambda c: c[0], reverse=True)
            beam = candidates[: self._config.beam_size]

        _, tags, probs = beam[0]
        return tags, probs

    def decode(
        self, tokens: Sequence[str], validator: Validator
    ) -> Tuple[List[TokenSpan], List[float]]:
        tags, probs = self.best_sequence(tokens, validator)
        spans, confs = tags_to_spans(tags, probs)

        for span in spans:
            for token in tokens[span.start:span.end]:
                self._adaptive[token] = span.label
        return spans, confs
