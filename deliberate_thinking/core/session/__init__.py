"""Session engine: one owned SessionState, folded forward one call at a time.

The stores never validate; by the time a delta reaches them the validator and
the ledger reference check have already accepted the whole call.
"""
