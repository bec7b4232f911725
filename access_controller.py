"""CLI entry: decide access for face embeddings supplied as JSON.

Embedding extraction happens upstream; this script only consumes the vectors.
Input file forms: a single vector `[0.1, ...]`, a list of vectors, or
`{"embeddings": [[...], ...]}`.
"""

from __future__ import annotations

import argparse
import json
import sys
import time

from pathlib import Path
from typing import List

from src import config
from src.access.controller import AccessController
from src.access.decision import StaticDecisionProvider
from src.access.errors import AccessError
from src.access.matcher import CosineMatcher, MatcherConfig
from src.access.store import RecordStore, StoreConfig
from src.utils.log import get_logger, set_level
from src.utils.serializer import serialize_result

logger = get_logger(__name__)


def _is_number(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def load_embeddings(path: str) -> List[List[float]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("embeddings")
    if not isinstance(data, list) or not data:
        raise ValueError(f"no embeddings found in {path}")
    # A flat list of numbers is a single embedding.
    if all(_is_number(x) for x in data):
        return [list(data)]
    out = []
    for i, v in enumerate(data):
        if not isinstance(v, list) or not all(_is_number(x) for x in v):
            raise ValueError(f"embedding #{i} in {path} is not a list of numbers")
        out.append(list(v))
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Face embedding access control: match known faces or enroll new ones")
    parser.add_argument("input", nargs="?", help="JSON file with one or more embeddings")
    parser.add_argument("--database", "-d", default=config.DATABASE, help=f"store file (default {config.DATABASE})")
    parser.add_argument(
        "--decision",
        choices=["allow", "deny"],
        default="deny",
        help="decision recorded for faces that match no enrolled identity (default deny)",
    )
    parser.add_argument(
        "--threshold", "-t", type=float, default=config.MATCH_THRESHOLD, help="cosine match threshold (strict >)"
    )
    parser.add_argument("--strict", action="store_true", help="fail on a corrupt store instead of starting empty")
    parser.add_argument("--output-json", "-j", default=None, help="write per-embedding results to this file")
    parser.add_argument("--list", action="store_true", help="print the enrolled identities and exit")
    parser.add_argument("--debug-match", action="store_true", help="log top-k similarities for each embedding")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level("DEBUG")

    store = RecordStore(StoreConfig(path=args.database, strict=bool(args.strict)))

    if args.list:
        try:
            records = store.load()
        except AccessError as e:
            logger.error(str(e))
            return 2
        for rec in records:
            print(f"{rec.id}\tdim={rec.dim}\tallowed={rec.decision}")
        logger.info(f"{len(records)} enrolled identities in {args.database}")
        return 0

    if not args.input:
        logger.error("input embeddings file is required (or use --list)")
        return 2

    try:
        embeddings = load_embeddings(args.input)
    except (OSError, ValueError) as e:
        logger.error(f"cannot read embeddings: {e}")
        return 2

    matcher = CosineMatcher(MatcherConfig(threshold=float(args.threshold)))
    controller = AccessController(store, matcher, StaticDecisionProvider(args.decision == "allow"))

    results = []
    for i, emb in enumerate(embeddings):
        if args.debug_match:
            try:
                for rec, sim in matcher.rank(emb, store.load()):
                    logger.info(f"[{i}] candidate {rec.id}: {sim:.4f}")
            except AccessError as e:
                logger.warning(f"[{i}] debug ranking skipped: {e}")
        try:
            res = controller.process(emb)
        except AccessError as e:
            logger.error(f"[{i}] {e}")
            return 1
        print(res.message)
        results.append(serialize_result(res))

    if args.output_json:
        out = Path(args.output_json)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w", encoding="utf-8") as f:
            json.dump({"database": str(args.database), "results": results}, f, indent=2, ensure_ascii=False)
        logger.info(f"results written to {out}")
    return 0


if __name__ == "__main__":
    st = time.time()
    code = main()
    logger.info(f"total time: {time.time() - st:.2f}s")
    sys.exit(code)
