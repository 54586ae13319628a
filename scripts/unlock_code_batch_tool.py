from __future__ import annotations

import argparse
import asyncio
import csv
from datetime import datetime, timezone
from pathlib import Path

from shellff.core.config import get_settings
from shellff.core.logging import configure_logging
from shellff.db.database import Database
from shellff.unlock.codes import generate_batch_codes
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import IssuedBatch


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Unlock code batch issuing tool")
    parser.add_argument("--release-id", type=int, required=True)
    parser.add_argument("--quantity", type=int, required=True)
    parser.add_argument("--created-by", required=True)
    parser.add_argument("--batch-key")
    parser.add_argument("--output-csv", type=Path)
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args()


def _validate_args(args: argparse.Namespace, *, batch_max: int) -> None:
    if args.release_id <= 0:
        raise ValueError("--release-id must be positive")
    if args.quantity <= 0:
        raise ValueError("--quantity must be positive")
    if args.quantity > batch_max:
        raise ValueError(f"--quantity must not exceed {batch_max}")
    if not args.created_by.strip():
        raise ValueError("--created-by must not be empty")


def _build_dry_run_batch(args: argparse.Namespace) -> IssuedBatch:
    return IssuedBatch(
        batch_id=0,
        batch_key=args.batch_key or "dry_run",
        release_id=args.release_id,
        codes=generate_batch_codes(args.quantity),
        created_at=datetime.now(timezone.utc),
    )


async def _issue_batch(args: argparse.Namespace) -> IssuedBatch:
    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        service = UnlockCodeService(database, batch_max=settings.unlock_code_batch_max)
        return await service.issue_batch(
            release_id=args.release_id,
            quantity=args.quantity,
            created_by=args.created_by.strip(),
            batch_key=args.batch_key,
        )
    finally:
        await database.dispose()


def _write_output(path: Path, batch: IssuedBatch) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["code", "release_id", "batch_key"])
        for code in batch.codes:
            writer.writerow([code, batch.release_id, batch.batch_key])


async def _run() -> int:
    args = _parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)
    _validate_args(args, batch_max=settings.unlock_code_batch_max)

    batch = _build_dry_run_batch(args) if args.dry_run else await _issue_batch(args)

    output_csv = args.output_csv or Path(f"reports/unlock_codes_release_{args.release_id}.csv")
    _write_output(output_csv, batch)
    print(
        f"processed={len(batch.codes)} inserted={0 if args.dry_run else len(batch.codes)} "  # noqa: T201
        f"batch_key={batch.batch_key} output={output_csv}"
    )
    return 0


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
