# namefinder/errors.py


class NameFinderError(Exception):
    """Base class for name finder failures."""


class ModelLoadFailure(NameFinderError):
    """The tagger model is missing or cannot be read."""


class DecodeUnavailable(ModelLoadFailure):
    """Decoding was requested but no tagger is loaded."""


class InvalidSpanInput(NameFinderError, ValueError):
    """A sentence, token or verified span is malformed or out of bounds."""


class DecodeError(NameFinderError):
    """The tagger found no tag sequence accepted by the validator."""
