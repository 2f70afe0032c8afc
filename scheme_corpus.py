"""
Government scheme corpus - loads the static scheme collection once at startup
"""
import json
import logging
from collections import Counter
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from kisan_models import SchemeRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("summary", "eligibility", "link")


class SchemeCorpus:
    """Read-only collection of scheme records"""

    def __init__(self, records: Sequence[SchemeRecord] = (), source: Optional[str] = None):
        self._records: Tuple[SchemeRecord, ...] = tuple(records)
        self.source = source

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SchemeRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> SchemeRecord:
        return self._records[index]

    @property
    def is_empty(self) -> bool:
        return not self._records

    @classmethod
    def from_dicts(cls, items: List[Dict[str, Any]], source: Optional[str] = None) -> "SchemeCorpus":
        """Build a corpus from parsed JSON objects, skipping unusable entries"""
        records = []
        for position, item in enumerate(items):
            record = _parse_record(item, position)
            if record is not None:
                records.append(record)

        _warn_duplicate_names(records)
        return cls(records, source=source)


def _parse_record(item: Any, position: int) -> Optional[SchemeRecord]:
    """Convert one JSON object to a SchemeRecord; the name may be stored as 'scheme' or 'name'"""
    if not isinstance(item, dict):
        logger.warning(f"Skipping scheme entry {position}: expected an object, got {type(item).__name__}")
        return None

    name = item.get("name") or item.get("scheme")
    if isinstance(name, str):
        name = name.strip()
    missing = [field for field in REQUIRED_FIELDS if item.get(field) is None]
    if not name:
        missing.insert(0, "name")
    if missing:
        logger.warning(f"Skipping scheme entry {position}: missing {', '.join(missing)}")
        return None

    try:
        return SchemeRecord(
            name=name,
            summary=item["summary"],
            eligibility=item["eligibility"],
            link=item["link"],
        )
    except ValidationError as e:
        logger.warning(f"Skipping scheme entry {position}: {e}")
        return None


def _warn_duplicate_names(records: List[SchemeRecord]):
    counts = Counter(record.name.casefold() for record in records)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        logger.warning(f"Duplicate scheme names in corpus: {duplicates}")


def load_corpus(source_path: str) -> SchemeCorpus:
    """
    Load the scheme corpus from a JSON array file.

    A missing or malformed file yields an empty corpus; the failure is logged
    and every query against it resolves to the error result.
    """
    try:
        with open(source_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load or parse scheme corpus {source_path}: {e}")
        return SchemeCorpus(source=source_path)

    if not isinstance(data, list):
        logger.error(f"Scheme corpus {source_path} must hold a JSON array, got {type(data).__name__}")
        return SchemeCorpus(source=source_path)

    corpus = SchemeCorpus.from_dicts(data, source=source_path)
    logger.info(f"Loaded {len(corpus)} schemes from {source_path}")
    return corpus
