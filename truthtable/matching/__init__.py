"""
Entity resolution layer.

Responsibilities:
- Provide string, address and geographic similarity primitives.
- Decide which listing from source B describes the same restaurant as a
  listing from source A.
- Build merged restaurant entities with derived classification fields.
"""
