"""
Source boundary package.

Responsibilities:
- Normalize raw platform A and platform B payloads into canonical records.
- Fetch both sources concurrently, absorbing per-source failures.
- Optionally substitute flagged synthetic reviews for a failed source.
"""
