"""
Contract Kernel

The lifecycle and consistency core for school-connectivity procurement
contracts:
- Atomic contract creation (schools, expected metrics, attachments, draft promotion)
- Forward-only status state machine with an append-only transition ledger
- Role-scoped list and count views with per-school connectivity classification
"""

__version__ = "0.1.0"
