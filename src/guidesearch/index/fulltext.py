"""In-memory inverted index with BM25+ ranking, prefix and fuzzy matching.

The index is small enough to keep entirely in memory and to serialize as a
single JSON object. Scoring works per field: every matching field contributes
``weight * boost * bm25(tf, df, field_length)``, where ``weight`` is 1 for an
exact term, lower for prefix and fuzzy expansions. A document's total is
multiplied by the number of query terms it matched, so documents matching
more of the query rise above documents matching one term many times.
"""

from __future__ import annotations

import bisect
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from guidesearch.index.schema import SearchSchema
from guidesearch.utils.text import tokenize

FORMAT_VERSION = 1

BM25_K = 1.2
BM25_B = 0.7
BM25_D = 0.5
PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45
MAX_FUZZY = 6


@dataclass(slots=True)
class Hit:
    id: str
    score: float
    terms: List[str]
    match: Dict[str, List[str]]
    stored: Dict[str, Any] = field(default_factory=dict)


def edit_distance(a: str, b: str, max_distance: int) -> Optional[int]:
    """Levenshtein distance between ``a`` and ``b``, or None above the bound."""
    if a == b:
        return 0
    if abs(len(a) - len(b)) > max_distance:
        return None
    previous = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        current = [i] + [0] * len(b)
        row_min = i
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            current[j] = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            row_min = min(row_min, current[j])
        if row_min > max_distance:
            return None
        previous = current
    return previous[-1] if previous[-1] <= max_distance else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class FullTextIndex:
    """Inverted index over the fields of a :class:`SearchSchema`."""

    def __init__(self, schema: SearchSchema) -> None:
        self.schema = schema
        self._ids: List[str] = []
        self._short_ids: Dict[str, int] = {}
        self._field_lengths: List[List[int]] = []
        self._stored: List[Dict[str, Any]] = []
        # term -> field position -> short doc id -> term frequency
        self._terms: Dict[str, Dict[int, Dict[int, int]]] = {}
        self._sorted_terms: Optional[List[str]] = None

    @property
    def document_count(self) -> int:
        return len(self._ids)

    def has(self, doc_id: str) -> bool:
        return doc_id in self._short_ids

    def add(self, document: Mapping[str, Any]) -> None:
        doc_id = str(document[self.schema.id_field])
        if doc_id in self._short_ids:
            raise ValueError(f"Duplicate document id: {doc_id}")

        short_id = len(self._ids)
        self._ids.append(doc_id)
        self._short_ids[doc_id] = short_id

        lengths = []
        for position, name in enumerate(self.schema.fields):
            tokens = tokenize(str(document.get(name) or ""))
            lengths.append(len(tokens))
            for token in tokens:
                postings = self._terms.setdefault(token, {}).setdefault(position, {})
                postings[short_id] = postings.get(short_id, 0) + 1
        self._field_lengths.append(lengths)
        self._stored.append(
            {name: document[name] for name in self.schema.store_fields if name in document}
        )
        self._sorted_terms = None

    def add_all(self, documents: Iterable[Mapping[str, Any]]) -> None:
        for document in documents:
            self.add(document)

    def search(
        self,
        query: str,
        *,
        boost: Optional[Mapping[str, float]] = None,
        fuzzy: Optional[float] = None,
        prefix: Optional[bool] = None,
    ) -> List[Hit]:
        """Rank documents against ``query``; any matching term is enough."""
        boost = self.schema.boost if boost is None else boost
        fuzzy = self.schema.fuzzy if fuzzy is None else fuzzy
        prefix = self.schema.prefix if prefix is None else prefix

        query_terms = list(dict.fromkeys(tokenize(query)))
        if not query_terms or not self._ids:
            return []

        averages = self._average_field_lengths()
        scores: Dict[int, float] = defaultdict(float)
        matched_terms: Dict[int, List[str]] = defaultdict(list)
        matches: Dict[int, Dict[str, List[str]]] = defaultdict(dict)

        for query_term in query_terms:
            for term, weight in self._expand(query_term, fuzzy, prefix).items():
                for position, postings in self._terms[term].items():
                    name = self.schema.fields[position]
                    field_boost = boost.get(name, 1.0)
                    for short_id, frequency in postings.items():
                        raw = self._bm25(frequency, len(postings), self._field_lengths[short_id][position], averages[position])
                        scores[short_id] += weight * field_boost * raw
                        fields = matches[short_id].setdefault(term, [])
                        if name not in fields:
                            fields.append(name)
                        if query_term not in matched_terms[short_id]:
                            matched_terms[short_id].append(query_term)

        hits = [
            Hit(
                id=self._ids[short_id],
                score=score * len(matched_terms[short_id]),
                terms=matched_terms[short_id],
                match=matches[short_id],
                stored=dict(self._stored[short_id]),
            )
            for short_id, score in scores.items()
        ]
        hits.sort(key=lambda hit: (-hit.score, self._short_ids[hit.id]))
        return hits

    def _expand(self, query_term: str, fuzzy: float, prefix: bool) -> Dict[str, float]:
        """Map indexed terms matching ``query_term`` to their weight."""
        expanded: Dict[str, float] = {}
        if query_term in self._terms:
            expanded[query_term] = 1.0

        if prefix:
            for term in self._prefixed(query_term):
                distance = len(term) - len(query_term)
                if distance:
                    expanded[term] = PREFIX_WEIGHT * len(term) / (len(term) + 0.3 * distance)

        if fuzzy:
            max_distance = fuzzy if fuzzy >= 1 else min(MAX_FUZZY, _round_half_up(len(query_term) * fuzzy))
            if max_distance:
                for term in self._terms:
                    if term in expanded:
                        continue
                    distance = edit_distance(query_term, term, int(max_distance))
                    if distance:
                        expanded[term] = FUZZY_WEIGHT * len(term) / (len(term) + distance)
        return expanded

    def _prefixed(self, query_term: str) -> List[str]:
        if self._sorted_terms is None:
            self._sorted_terms = sorted(self._terms)
        start = bisect.bisect_left(self._sorted_terms, query_term)
        found = []
        for term in self._sorted_terms[start:]:
            if not term.startswith(query_term):
                break
            found.append(term)
        return found

    def _average_field_lengths(self) -> List[float]:
        count = len(self._field_lengths)
        return [
            sum(lengths[position] for lengths in self._field_lengths) / count
            for position in range(len(self.schema.fields))
        ]

    def _bm25(self, frequency: int, matching: int, field_length: int, average: float) -> float:
        total = len(self._ids)
        idf = math.log(1 + (total - matching + 0.5) / (matching + 0.5))
        ratio = field_length / average if average else 0.0
        return idf * (BM25_D + frequency * (BM25_K + 1) / (frequency + BM25_K * (1 - BM25_B + BM25_B * ratio)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "fields": list(self.schema.fields),
            "storeFields": list(self.schema.store_fields),
            "documentIds": list(self._ids),
            "fieldLengths": [list(lengths) for lengths in self._field_lengths],
            "storedFields": [dict(stored) for stored in self._stored],
            "index": {
                term: {
                    self.schema.fields[position]: {str(short_id): tf for short_id, tf in postings.items()}
                    for position, postings in by_field.items()
                }
                for term, by_field in self._terms.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], schema: SearchSchema) -> "FullTextIndex":
        """Rebuild an index serialized by :meth:`to_dict`.

        Raises ``ValueError`` when the data was produced with other fields.
        """
        if data.get("version") != FORMAT_VERSION:
            raise ValueError(f"Unsupported index format: {data.get('version')!r}")
        if list(data.get("fields", [])) != list(schema.fields):
            raise ValueError("Index fields do not match the search schema")
        if list(data.get("storeFields", [])) != list(schema.store_fields):
            raise ValueError("Index stored fields do not match the search schema")

        index = cls(schema)
        index._ids = [str(doc_id) for doc_id in data["documentIds"]]
        index._short_ids = {doc_id: short_id for short_id, doc_id in enumerate(index._ids)}
        index._field_lengths = [[int(length) for length in lengths] for lengths in data["fieldLengths"]]
        index._stored = [dict(stored) for stored in data["storedFields"]]
        if not (len(index._ids) == len(index._field_lengths) == len(index._stored)):
            raise ValueError("Index document tables have inconsistent sizes")

        positions = {name: position for position, name in enumerate(schema.fields)}
        for term, by_field in data["index"].items():
            index._terms[term] = {
                positions[name]: {int(short_id): int(tf) for short_id, tf in postings.items()}
                for name, postings in by_field.items()
            }
        return index
