"""
Scheme Matcher - approximate lexical search over the scheme corpus
"""
import logging
import re
from typing import Dict, FrozenSet, List, Optional, Tuple

import numpy as np
from rapidfuzz import fuzz, process
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, TfidfVectorizer

from config import SCHEME_MATCH_THRESHOLD, SCHEME_TOKEN_CUTOFF
from kisan_models import MatchCandidate, SchemeRecord
from scheme_corpus import SchemeCorpus

logger = logging.getLogger(__name__)

# Word characters plus the Indic blocks (Devanagari to Sinhala) so vowel signs stay inside words
_TOKEN_RE = re.compile(r"[\w\u0900-\u0DFF]+")

COVERAGE_WEIGHT = 0.8
NAME_WEIGHT = 0.2
EXACT_NAME_SCORE = 100.0


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens, punctuation dropped"""
    if not text:
        return []
    return [token for token in _TOKEN_RE.findall(text.casefold()) if token != "_"]


def content_tokens(text: str) -> List[str]:
    """Tokens without English stop words"""
    return [token for token in tokenize(text) if token not in ENGLISH_STOP_WORDS]


def normalize(text: str) -> str:
    return " ".join(tokenize(text))


class _IndexedScheme:
    """Pre-processed view of one record"""

    def __init__(self, record: SchemeRecord):
        self.record = record
        self.name_key = normalize(record.name)
        self.tokens: FrozenSet[str] = frozenset(
            content_tokens(record.name)
            + content_tokens(record.summary)
            + content_tokens(record.eligibility)
        )
        self.token_list: List[str] = sorted(self.tokens)


class SchemeIndex:
    """
    Fuzzy token index over scheme name, summary and eligibility.

    Scores run from 0 to 100 and higher is better:

        score = 0.8 * weighted token coverage + 0.2 * name similarity

    Token coverage is the IDF-weighted mean, over the query's content tokens,
    of the best edit-distance similarity against the record's tokens; a token
    under ``token_cutoff`` contributes 0. A query equal to a record's name
    (ignoring case and punctuation) scores 100, which no other record reaches.
    """

    def __init__(self, corpus: SchemeCorpus, threshold: float = SCHEME_MATCH_THRESHOLD,
                 token_cutoff: float = SCHEME_TOKEN_CUTOFF):
        self.corpus = corpus
        self.threshold = threshold
        self.token_cutoff = token_cutoff
        self._entries: Tuple[_IndexedScheme, ...] = ()
        self._idf: Dict[str, float] = {}
        self._vocabulary: List[str] = []
        self._max_idf = 1.0

    @classmethod
    def build(cls, corpus: SchemeCorpus, threshold: float = SCHEME_MATCH_THRESHOLD,
              token_cutoff: float = SCHEME_TOKEN_CUTOFF) -> "SchemeIndex":
        """Build the index once; the result is read-only"""
        index = cls(corpus, threshold=threshold, token_cutoff=token_cutoff)
        index._entries = tuple(_IndexedScheme(record) for record in corpus)
        index._fit_idf()
        logger.info(f"Built scheme index for {len(index._entries)} schemes "
                    f"({len(index._vocabulary)} terms, threshold={threshold})")
        return index

    def _fit_idf(self):
        """Learn token rarity across the corpus"""
        documents = [
            f"{entry.record.name} {entry.record.summary} {entry.record.eligibility}"
            for entry in self._entries
        ]
        if not documents:
            return

        vectorizer = TfidfVectorizer(analyzer=content_tokens)
        try:
            vectorizer.fit(documents)
        except ValueError as e:
            # Corpus holds only stop words; all tokens weigh the same
            logger.warning(f"Could not learn term weights for scheme index: {e}")
            return

        idf = vectorizer.idf_
        self._idf = {term: float(idf[column]) for term, column in vectorizer.vocabulary_.items()}
        self._vocabulary = sorted(self._idf)
        self._max_idf = float(np.max(idf))

    def __len__(self) -> int:
        return len(self._entries)

    def _token_weight(self, token: str) -> float:
        if token in self._idf:
            return self._idf[token]
        if self._vocabulary:
            match = process.extractOne(token, self._vocabulary, scorer=fuzz.ratio,
                                       processor=None, score_cutoff=self.token_cutoff)
            if match is not None:
                return self._idf[match[0]]
        # Unknown words are treated as the rarest
        return self._max_idf

    def _token_similarity(self, token: str, entry: _IndexedScheme) -> float:
        if token in entry.tokens:
            return 100.0
        if not entry.token_list:
            return 0.0
        match = process.extractOne(token, entry.token_list, scorer=fuzz.ratio,
                                   processor=None, score_cutoff=self.token_cutoff)
        return float(match[1]) if match is not None else 0.0

    def _score(self, query: str, entry: _IndexedScheme, weighted_tokens: Optional[List[Tuple[str, float]]] = None) -> float:
        """Similarity of one indexed record to the query"""
        query_key = normalize(query)
        if query_key and query_key == entry.name_key:
            return EXACT_NAME_SCORE

        if weighted_tokens is None:
            weighted_tokens = [(token, self._token_weight(token)) for token in content_tokens(query)]
        total_weight = sum(weight for _, weight in weighted_tokens)
        if total_weight <= 0:
            return 0.0

        coverage = sum(weight * self._token_similarity(token, entry) for token, weight in weighted_tokens) / total_weight
        name_similarity = fuzz.ratio(query_key, entry.name_key)
        return COVERAGE_WEIGHT * coverage + NAME_WEIGHT * name_similarity

    def search(self, query: str, limit: int = 5) -> List[MatchCandidate]:
        """Return candidates at or above the threshold, best first, at most ``limit``"""
        if not query or not query.strip() or not self._entries or limit <= 0:
            return []

        # Repeated words count once
        unique_tokens = list(dict.fromkeys(content_tokens(query)))
        weighted_tokens = [(token, self._token_weight(token)) for token in unique_tokens]

        scored = []
        for position, entry in enumerate(self._entries):
            value = self._score(query, entry, weighted_tokens)
            if value >= self.threshold:
                scored.append((value, position, entry.record))

        # Ties keep corpus order
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [MatchCandidate(record=record, score=round(value, 4)) for value, _, record in scored[:limit]]
