"""
achfile - ACH (NACHA) payment file toolkit.

Parses fixed-width NACHA files into File -> Batch -> Entry trees, lets callers
remove entries, and writes the file back with recomputed control totals.
"""

__version__ = "0.1.0"
