"""Typed models: decoded ledger input (`ledger`) and transformed output (`operation`)."""
