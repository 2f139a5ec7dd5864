"""
Fetch Sheet Snapshot
====================

Downloads a sheet's structure (no rows) and saves it as a SheetInfo snapshot.
If a snapshot already exists at the output path it is treated as the
baseline: the fresh sheet is compared against it first, and the script exits
with status 1 when columns were renamed, retyped, added or removed.

Usage
-----
1. Set environment variables (or a .env file):
   - SMARTSHEET_API_KEY

2. Run:
   python fetch_sheet_snapshot.py <sheet_id> [output_path]

   output_path defaults to sheet_<sheet_id>.json
"""

import logging
import os
import sys

from dotenv import load_dotenv

from sheetinfo import NO_ROWS, SheetInfo, SmartsheetClient

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


def main(argv) -> int:
    if len(argv) < 2:
        print(__doc__)
        return 2

    sheet_id = int(argv[1])
    output_path = argv[2] if len(argv) > 2 else f"sheet_{sheet_id}.json"

    with SmartsheetClient.from_env() as client:
        sheet = SheetInfo(client)
        sheet.load(sheet_id, NO_ROWS)

    if os.path.exists(output_path):
        baseline = SheetInfo()
        baseline.restore(output_path)
        if not sheet.match_sheet(baseline):
            logger.error(f"Sheet {sheet_id} no longer matches baseline {output_path}; baseline kept")
            return 1
        logger.info(f"Sheet {sheet_id} matches baseline {output_path}")

    sheet.store(output_path)
    sheet.show()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
