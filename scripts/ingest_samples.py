"""Load recognition samples from a JSON or JSON Lines file into the record store."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterator, List

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models import SessionLocal, init_db
from services.aggregation import SqlAlchemyRecordStore, get_consensus, ingest

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def read_samples(path: Path) -> Iterator[dict]:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        for line in text.splitlines():
            if line.strip():
                yield json.loads(line)
        return
    payload = json.loads(text)
    if isinstance(payload, dict):
        payload = [payload]
    yield from payload


def load(path: Path, show: bool = False) -> None:
    init_db()
    session = SessionLocal()
    store = SqlAlchemyRecordStore(session)
    touched: List[str] = []
    accepted = rejected = malformed = 0

    try:
        for sample in read_samples(path):
            result = ingest(store, sample)
            if not result.accepted:
                rejected += 1
                continue
            accepted += 1
            malformed += len(result.malformed_fields)
            if result.key not in touched:
                touched.append(result.key)

        logger.info(
            f"Ingested {accepted} samples into {len(touched)} records, "
            f"{rejected} rejected, {malformed} malformed fields skipped"
        )

        if show:
            for key in touched:
                consensus = get_consensus(store, key)
                print(consensus.model_dump_json(indent=2))
    finally:
        session.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", type=Path, help="JSON array or .jsonl file of samples")
    parser.add_argument("--show", action="store_true", help="Print the consensus of every touched record")
    args = parser.parse_args()

    if not args.path.exists():
        parser.error(f"{args.path} does not exist")
    load(args.path, show=args.show)


if __name__ == "__main__":
    main()
