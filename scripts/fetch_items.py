import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from loguru import logger

from curate.core.config import get_settings
from ingestion.service import FetchProgress, ItemsService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch Light Curate registry items from the subgraph")
    parser.add_argument("--registry", required=True, help="Registry contract address")
    parser.add_argument("--chain-id", type=int, default=1, help="Chain id (1 or 100)")
    parser.add_argument(
        "--status",
        action="append",
        default=None,
        metavar="STATUS",
        help="Only fetch items with this status (repeatable, e.g. --status Registered)",
    )
    parser.add_argument(
        "--item-id",
        action="append",
        default=None,
        metavar="ITEM_ID",
        help="Only fetch these item ids (repeatable)",
    )
    parser.add_argument("--max-batches", type=int, default=None, help="Stop after N batches")
    parser.add_argument("--subgraph-url", default=None, help="Override the subgraph endpoint")
    parser.add_argument("--output", type=Path, default=None, help="Write items as JSON to this file")
    return parser.parse_args()


def _log_progress(progress: FetchProgress) -> None:
    if progress.total is None:
        logger.info("Loaded {} items so far", progress.loaded)
    else:
        logger.info("Loaded all {} items", progress.total)


async def run(args: argparse.Namespace) -> int:
    filters: dict[str, list[str]] = {}
    if args.status:
        filters["status"] = args.status
    if args.item_id:
        filters["itemID"] = args.item_id

    async with ItemsService(settings=get_settings()) as service:
        result = await service.fetch_items(
            args.registry,
            args.chain_id,
            subgraph_url=args.subgraph_url,
            force_refresh=bool(args.item_id),
            on_progress=_log_progress,
            max_batches=args.max_batches,
            filters=filters or None,
        )

    logger.info(
        "Fetched {} items in {} batches", result.stats.total, result.stats.batches
    )
    if args.output:
        payload = [
            {key: value for key, value in asdict(item).items() if key != "raw_data"}
            for item in result.items
        ]
        args.output.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        logger.info("Wrote items to {}", args.output)
    return result.stats.total


def main() -> None:
    asyncio.run(run(parse_args()))


if __name__ == "__main__":
    main()
