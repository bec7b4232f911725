from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from src.access.decision import DecisionProvider
from src.access.errors import StoreError
from src.access.matcher import CosineMatcher
from src.access.record import EmbeddingRecord
from src.access.store import RecordStore
from src.utils.log import get_logger
from src.utils.math import VectorLike, as_vector

logger = get_logger(__name__)


@dataclass
class AccessResult:
    decision: bool
    is_new_identity: bool
    record: Optional[EmbeddingRecord] = None
    # Similarity to the matched record (None for new identities).
    similarity: Optional[float] = None

    @property
    def message(self) -> str:
        if not self.decision:
            return "ALERT: access denied! Unauthorised entry!"
        if self.is_new_identity:
            return "Access granted. Welcome!"
        return "Welcome back!"


class AccessController:
    """Decide-or-enroll flow for one face embedding at a time.

    1. match the embedding against the current store contents;
    2. on a hit return the stored decision (nothing is written);
    3. on a miss ask the decision provider, enroll a new record and return
       the obtained decision.
    """

    def __init__(self, store: RecordStore, matcher: CosineMatcher, decision_provider: DecisionProvider):
        self.store = store
        self.matcher = matcher
        self.decision_provider = decision_provider

    def process(self, embedding: VectorLike) -> AccessResult:
        """Resolve one embedding.

        Raises:
            InvalidEmbeddingError: the embedding is empty, non-finite or zero.
            StoreError: the store could not be read, or the new record could not be written.
        """
        vec = as_vector(embedding)
        try:
            records = self.store.load()
        except StoreError as e:
            logger.error(f"lookup aborted: {e}")
            raise

        match, sim = self.matcher.find_match_with_score(vec, records)
        if match is not None:
            logger.info(f"known identity {match.id} (similarity={sim:.4f}, allowed={match.decision})")
            return AccessResult(decision=match.decision, is_new_identity=False, record=match, similarity=sim)

        decision = bool(self.decision_provider.decide(vec.tolist()))
        record = EmbeddingRecord.create(vec.tolist(), decision)
        try:
            self.store.append(record)
        except StoreError as e:
            logger.error(f"enrollment of {record.id} not committed: {e}")
            raise
        logger.info(f"enrolled new identity {record.id} (allowed={decision})")
        return AccessResult(decision=decision, is_new_identity=True, record=record)

    def process_many(self, embeddings: Iterable[VectorLike]) -> List[AccessResult]:
        """Process the faces of one frame in order, each fully before the next."""
        return [self.process(e) for e in embeddings]
