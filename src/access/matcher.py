from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src import config
from src.access.errors import InvalidEmbeddingError
from src.access.record import EmbeddingRecord
from src.utils.log import get_logger
from src.utils.math import VectorLike, as_vector, cosine_of, cosine_similarity, scaled_with_norm

logger = get_logger(__name__)


@dataclass
class MatcherConfig:
    # Similarity must be strictly greater than this for a record to match.
    threshold: float = config.MATCH_THRESHOLD


class CosineMatcher:
    """First-match cosine matcher over the stored records.

    Records are scanned in enrollment order and the earliest one above the
    threshold wins, even when a later record is more similar.
    """

    def __init__(self, cfg: Optional[MatcherConfig] = None):
        self.config = cfg or MatcherConfig()

    @property
    def threshold(self) -> float:
        return float(self.config.threshold)

    def similarity(self, a: VectorLike, b: VectorLike) -> float:
        return cosine_similarity(a, b)

    def _similarity_to(self, q: np.ndarray, qn: float, rec: EmbeddingRecord) -> Optional[float]:
        """Similarity of the prepared query to one record, None if the record cannot be compared."""
        if rec.dim != q.shape[0]:
            logger.warning(f"skip record {rec.id}: dimension {rec.dim} != query {q.shape[0]}")
            return None
        try:
            v, vn = scaled_with_norm(as_vector(rec.embedding))
            return cosine_of(v, vn, q, qn)
        except InvalidEmbeddingError as e:
            logger.warning(f"skip record {rec.id}: {e}")
            return None

    def find_match(self, query: VectorLike, records: Sequence[EmbeddingRecord]) -> Optional[EmbeddingRecord]:
        """Return the first record whose similarity to `query` exceeds the threshold."""
        rec, _ = self.find_match_with_score(query, records)
        return rec

    def find_match_with_score(
        self, query: VectorLike, records: Sequence[EmbeddingRecord]
    ) -> Tuple[Optional[EmbeddingRecord], Optional[float]]:
        """Like `find_match` but also returns the matched similarity.

        Stops at the first hit; later records are not compared.
        Raises InvalidEmbeddingError if the query itself is unusable.
        """
        q, qn = scaled_with_norm(as_vector(query))
        thr = self.threshold
        for rec in records:
            sim = self._similarity_to(q, qn, rec)
            if sim is not None and sim > thr:
                return rec, sim
        return None, None

    def rank(
        self, query: VectorLike, records: Sequence[EmbeddingRecord], topk: int = 5
    ) -> List[Tuple[EmbeddingRecord, float]]:
        """Top-k (record, similarity) best-first. Debug output only; matching stays first-match."""
        q, qn = scaled_with_norm(as_vector(query))
        scored = []
        for rec in records:
            sim = self._similarity_to(q, qn, rec)
            if sim is not None:
                scored.append((rec, sim))
        scored.sort(key=lambda x: -x[1])
        return scored[: int(max(1, topk))]
