#!/usr/bin/env python3
"""
Daily route generation job.

Run every morning before shifts start (recommended) via cron:
    30 5 * * * cd /path/to/smart-waste && python -m cron.generate_daily_routes

This script:
1. Replaces today's routes with a fresh plan
2. Optionally starts every route of the day right away
3. Logs the outcome for monitoring
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from typing import Optional

from smartwaste.config import get_settings
from smartwaste.database import async_session_maker
from smartwaste.services.auto_route_service import generate_routes
from smartwaste.services.route_status_service import start_collecting_for_date


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("generate_daily_routes")


async def run_daily_routes(
    route_date: date,
    threshold: Optional[int] = None,
    max_stops: Optional[int] = None,
    start: bool = False,
) -> dict:
    """
    Main entry point for the daily route job.

    Returns:
        Dict with execution metrics
    """
    async with async_session_maker() as db:
        result = await generate_routes(db, route_date, threshold, max_stops)
        metrics = {
            "route_date": route_date.isoformat(),
            "routes_created": result.routes_created,
            "bins_used": result.bins_used,
            "bins_unassigned": result.bins_unassigned,
            "bins_held": result.bins_held,
            "message": result.message,
        }
        if start and result.routes_created:
            metrics["routes_started"] = await start_collecting_for_date(db, route_date)
        return metrics


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate collection routes for a day.")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today())
    parser.add_argument("--threshold", type=int, default=settings.default_threshold)
    parser.add_argument("--max-stops", type=int, default=settings.default_max_stops)
    parser.add_argument("--start", action="store_true", help="Start all routes after generating")
    return parser.parse_args(argv)


def main(argv=None):
    """CLI entry point."""
    args = parse_args(argv)
    logger.info("=" * 60)
    logger.info("DAILY ROUTE GENERATION - " + datetime.utcnow().isoformat())
    logger.info("=" * 60)

    try:
        metrics = asyncio.run(
            run_daily_routes(args.date, args.threshold, args.max_stops, args.start)
        )

        # Print summary
        print("\n" + "=" * 40)
        print("ROUTE GENERATION SUMMARY")
        print("=" * 40)
        print(f"Date:             {metrics['route_date']}")
        print(f"Routes Created:   {metrics['routes_created']}")
        print(f"Bins Used:        {metrics['bins_used']}")
        print(f"Bins Unassigned:  {metrics['bins_unassigned']}")
        print(f"Bins Held:        {metrics['bins_held']}")
        if "routes_started" in metrics:
            print(f"Routes Started:   {metrics['routes_started']}")
        print(f"Message:          {metrics['message']}")
        print("=" * 40)

        return 0

    except Exception as e:
        logger.error(f"Route generation failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
