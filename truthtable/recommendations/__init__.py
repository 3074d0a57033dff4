"""
Search and ranking engine.

Responsibilities:
- Fetch and reconcile listings from both sources for a search.
- Filter merged restaurants by price, rating and cuisine.
- Score each restaurant on seven weighted factors and rank the results.
- Aggregate result-set insights and memoize responses for a short TTL.
"""
