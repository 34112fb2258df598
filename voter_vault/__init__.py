"""
Voter Vault: electoral roll ingestion.

Normalizes spreadsheets, PDF page text and scanned images of electoral
rolls into canonical voter records and upserts them by EPIC number.
"""

__version__ = "1.0.0"
