"""
Sheetbook - Source Package

Bookkeeping core for personal ledgers ("sheets") of three kinds:
trader, salary earner and artisan.

DESIGN PRINCIPLES:
1. Raw user input is kept verbatim; arithmetic runs on coerced numbers
2. Calculations are pure and cheap enough to run on every keystroke
3. Advisories (stock alerts, profit/loss) never block an edit
4. Storage layer is swappable (in-memory, local SQLite, Google Sheets)
5. A failed save never loses the in-memory sheet
"""

__version__ = "1.0.0"
__author__ = "Sheetbook Team"
