"""
LLM enrichment layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build a summarization prompt from a restaurant's review texts.
- Return a narrative digest, or nothing when the LLM is unavailable or
  returns invalid output.
"""
