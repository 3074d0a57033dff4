"""
Review analysis package.

Responsibilities:
- Score each review's authenticity from its text and author history.
- Summarise themes, sentiment, trend and a balanced set of top reviews.
- Grade confidence and data quality from review volume and source coverage.
"""
