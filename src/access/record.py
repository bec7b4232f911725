from __future__ import annotations

import uuid

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple

from src import config


@dataclass(frozen=True)
class EmbeddingRecord:
    """One enrolled identity: an embedding and the access decision taken for it.

    Records are immutable; the store only ever appends new ones.
    """

    id: str
    embedding: Tuple[float, ...]
    decision: bool

    def __post_init__(self):
        # Accept any sequence (list, np.ndarray) but keep a hashable tuple of floats.
        try:
            values = tuple(float(x) for x in self.embedding)
        except OverflowError as e:
            raise ValueError(f"EmbeddingRecord.embedding value out of float range: {e}") from e
        object.__setattr__(self, "embedding", values)
        if not self.embedding:
            raise ValueError("EmbeddingRecord.embedding must not be empty")

    @classmethod
    def create(cls, embedding: Sequence[float], decision: bool) -> "EmbeddingRecord":
        return cls(id=str(uuid.uuid4()), embedding=tuple(embedding), decision=bool(decision))

    @property
    def dim(self) -> int:
        return len(self.embedding)

    def to_dict(self) -> Dict[str, Any]:
        return {
            config.FIELD_ID: self.id,
            config.FIELD_EMBEDDING: list(self.embedding),
            config.FIELD_DECISION: self.decision,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmbeddingRecord":
        """Build a record from its on-disk object.

        Raises ValueError when a field is missing or has the wrong type; the store
        turns that into `StoreCorruptError`.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"record must be an object, got {type(data).__name__}")
        missing = [k for k in (config.FIELD_ID, config.FIELD_EMBEDDING, config.FIELD_DECISION) if k not in data]
        if missing:
            raise ValueError(f"record is missing fields: {missing}")

        rid = data[config.FIELD_ID]
        emb = data[config.FIELD_EMBEDDING]
        decision = data[config.FIELD_DECISION]
        if not isinstance(rid, str) or not rid:
            raise ValueError("record id must be a non-empty string")
        if not isinstance(emb, list) or not all(
            isinstance(x, (int, float)) and not isinstance(x, bool) for x in emb
        ):
            raise ValueError(f"record {rid}: embedding must be a list of numbers")
        if not isinstance(decision, bool):
            raise ValueError(f"record {rid}: decision must be a boolean")
        return cls(id=rid, embedding=tuple(emb), decision=decision)
