"""
Run one subcategory average price computation from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from app.schemas.price_averaging import AggregationReportResponse
from app.services.price_averaging_orchestrator import (
    FATAL_ERRORS,
    get_price_averaging_orchestrator,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute and publish average hourly prices for every subcategory.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: LOG_LEVEL or INFO).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    orchestrator = get_price_averaging_orchestrator()
    try:
        report = orchestrator.run()
    except FATAL_ERRORS as exc:
        print(json.dumps({"error": str(exc)}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(AggregationReportResponse.from_domain(report).model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
