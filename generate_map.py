#!/usr/bin/env python3
"""
CommunityWatch - Generate Report Heat Map
Fetches today's reports from Firestore and writes an interactive heat map.
"""
import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from communitywatch.core.config import settings
from communitywatch.core.date_utils import get_formatted_date
from communitywatch.core.logging import setup_logging
from communitywatch.crowdsource.report_handler import ReportStore
from communitywatch.services.firebase_service import FirebaseService
from communitywatch.visualization.map_generator import save_heat_map


def main():
    parser = argparse.ArgumentParser(description="Render today's reports as a heat map")
    parser.add_argument("--date", default=None, help="Report day key (dd-mm-yy); defaults to today")
    parser.add_argument("--location", action="append", default=None, help="Only this location label (repeatable)")
    parser.add_argument("--output", default="reports_heatmap.html", help="Output HTML file")
    args = parser.parse_args()

    logger = setup_logging()

    if not (settings.firebase_credentials_path or settings.firebase_project_id):
        logger.error("FIREBASE_CREDENTIALS_PATH or FIREBASE_PROJECT_ID must be set in .env")
        sys.exit(1)

    date = args.date or get_formatted_date()
    logger.info(f"Fetching reports for {date}")

    store = ReportStore(FirebaseService())
    reports = store.get_reports(settings.reports_collection, date, locations=args.location)
    if store.error:
        logger.error(store.error)
        sys.exit(1)

    logger.info(f"Found {len(reports)} report(s)")
    stats = store.get_statistics()
    for report_type, count in sorted(stats["by_type"].items()):
        logger.info(f"  {report_type}: {count}")

    output = save_heat_map(reports, output_path=args.output)
    logger.info(f"Open {os.path.abspath(output)} in a browser to view the map")


if __name__ == "__main__":
    main()
