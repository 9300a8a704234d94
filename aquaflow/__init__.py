"""
AquaFlow - Source Package

Business ledger for a water-delivery service: customers, delivery areas,
daily jar/thermos deliveries, payments, monthly bills and supply sheets.

DESIGN PRINCIPLES:
1. The transaction log is the source of truth; balances are always derived
2. One transaction per customer per day, written as an upsert
3. Storage layer is swappable
4. External services fail soft and never touch stored data
"""

__version__ = "1.0.0"
__author__ = "AquaFlow Team"
