# namefinder/service.py

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Optional

from .config import NameFinderConfig
from .errors import ModelLoadFailure
from .models import STATUS_CANCELLED, DecodeRequest, DecodeResult
from .pipeline import TaggerLoader, load_failure_result, decode_document
from .tagger import Tagger, load_tagger

logger = logging.getLogger(__name__)


class NameFinderService:
    """
    Runs decode requests one at a time on a single worker thread.

    Submitting a request cancels the one in flight (it stops at the next
    sentence boundary) and queues behind it, so the tagger's adaptive state is
    only ever used by one document at a time. Taggers are loaded on first use
    and cached per model path.
    """

    def __init__(
        self,
        config: Optional[NameFinderConfig] = None,
        loader: TaggerLoader = load_tagger,
    ) -> None:
        self._config = config or NameFinderConfig()
        self._loader = loader
        self._taggers: Dict[str, Tagger] = {}
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="namefinder")
        self._lock = threading.Lock()
        self._current: Optional[threading.Event] = None

    @property
    def config(self) -> NameFinderConfig:
        return self._config

    def submit(self, request: DecodeRequest) -> "Future[DecodeResult]":
        with self._lock:
            if self._current is not None:
                self._current.set()
            cancel = threading.Event()
            self._current = cancel
            return self._executor.submit(self._run, request, cancel)

    def run(self, request: DecodeRequest) -> DecodeResult:
        return self.submit(request).result()

    def cancel(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.set()

    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)

    def _tagger_for(self, model_path: Optional[str]) -> Tagger:
        key = model_path or self._config.model
        tagger = self._taggers.get(key)
        if tagger is None:
            tagger = self._loader(key, self._config)
            self._taggers[key] = tagger
        return tagger

    def _run(self, request: DecodeRequest, cancel: threading.Event) -> DecodeResult:
        if cancel.is_set():
            logger.info("Request cancelled before it started")
            return DecodeResult(status=STATUS_CANCELLED)
        try:
            tagger = self._tagger_for(request.model_path)
        except ModelLoadFailure as e:
            return load_failure_result(e)
        return decode_document(request, tagger, self._config, cancel=cancel)
