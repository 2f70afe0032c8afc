import logging
from typing import Optional

from interaction_log import InteractionLog
from kisan_models import SchemeQueryResult
from scheme_corpus import SchemeCorpus
from scheme_matcher import SchemeIndex
from config import SCHEME_SEARCH_LIMIT

logger = logging.getLogger(__name__)


class SchemeCorpusUnavailable(Exception):
    """The scheme corpus is empty or failed to load"""


class SchemeAgentNode:
    """
    Scheme Agent - resolves a farmer's question to one government scheme.

    Every call ends in exactly one of three results: the best matching scheme,
    the "Not Found" result (a valid answer, the query cleared no scheme), or
    the "Error" result (empty corpus or an internal fault). Callers branch on
    ``result.scheme``; ``resolve`` never raises.

    Each query and result is handed to the interaction log without waiting on
    it; log failures never change the result.
    """

    def __init__(self, corpus: SchemeCorpus, index: Optional[SchemeIndex] = None,
                 interaction_log: Optional[InteractionLog] = None, limit: int = SCHEME_SEARCH_LIMIT):
        self.corpus = corpus
        self.index = index if index is not None else SchemeIndex.build(corpus)
        self.interaction_log = interaction_log
        self.limit = max(1, min(limit, SCHEME_SEARCH_LIMIT))

    def resolve(self, query: str) -> SchemeQueryResult:
        """Find the single best scheme for the query"""
        logger.info(f"SchemeAgent processing: {query}")

        try:
            if self.corpus.is_empty:
                raise SchemeCorpusUnavailable("Government schemes data is not loaded or is empty.")

            candidates = self.index.search(query, limit=self.limit)
            if not candidates:
                logger.info(f"No scheme cleared the match threshold for: {query}")
                result = SchemeQueryResult.not_found(query)
            else:
                best = candidates[0]
                logger.info(f"Best scheme match: {best.record.name} (score={best.score})")
                result = SchemeQueryResult.from_record(best.record)
        except Exception as e:
            logger.error(f"Error in scheme resolution: {e}")
            self._record_failure(query, e)
            return SchemeQueryResult.error()

        self._record(query, result)
        return result

    def _record(self, query: str, result: SchemeQueryResult):
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.record(query, result)
        except Exception as e:
            logger.error(f"Error logging scheme query: {e}")

    def _record_failure(self, query: str, error: Exception):
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.record_failure(query, error)
        except Exception as e:
            logger.error(f"Error logging scheme query failure: {e}")
