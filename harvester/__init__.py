"""
Annual Report Harvester - BSE/NSE Annual Report Download
========================================================

Downloads historical annual reports for a worklist of listed companies,
trying BSE first and NSE second, and writes a spreadsheet of every company
that could not be satisfied by either source.

Usage:
    python -m harvester.orchestrator --worklist companies.xlsx
"""

__version__ = "0.1.0"
