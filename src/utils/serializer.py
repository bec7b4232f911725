import json

from typing import Dict, Iterable, List

from src.access.record import EmbeddingRecord


def dump_records(records: Iterable[EmbeddingRecord], indent: int = 2) -> str:
    """Serialize records into the store file text (pretty-printed JSON array)."""
    return json.dumps([r.to_dict() for r in records], indent=indent, ensure_ascii=False)


def parse_records(text: str) -> List[EmbeddingRecord]:
    """Parse store file text.

    Raises ValueError (json.JSONDecodeError is one) when the text is not a JSON
    array of valid record objects or when two records share an id.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    out: List[EmbeddingRecord] = []
    seen = set()
    for item in data:
        rec = EmbeddingRecord.from_dict(item)
        if rec.id in seen:
            raise ValueError(f"duplicate record id {rec.id}")
        seen.add(rec.id)
        out.append(rec)
    return out


def serialize_result(result, include_embedding: bool = False) -> Dict:
    """Serialize an AccessResult into a JSON-safe dict for CLI output."""
    rec = result.record
    ed = {
        "decision": bool(result.decision),
        "is_new_identity": bool(result.is_new_identity),
        "id": rec.id if rec is not None else None,
        "similarity": float(result.similarity) if result.similarity is not None else None,
        "message": result.message,
    }
    if include_embedding and rec is not None:
        ed["embedding"] = [float(x) for x in rec.embedding]
    elif rec is not None:
        ed["dim"] = int(rec.dim)
    return ed
