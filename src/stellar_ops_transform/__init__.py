"""Per-operation detail extraction for Stellar ledger ETL."""

__all__ = []
