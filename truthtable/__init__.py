"""
TruthTable: cross-source restaurant reconciliation and scoring.

Responsibilities:
- Reconcile listings from two independent sources into one deduplicated set.
- Rank the merged restaurants with a multi-factor weighted score.
- Analyse mixed-source reviews into themes, sentiment, trend and top picks.
"""
