"""
Test suite for synthpool

Contains:
- tests/unit/          : Unit tests for share math, ledger, collateralization and pool engine
"""
