"""
Narrative explanation layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts from a ranked pick's already-computed scores.
- Call Groq to write a short explanation for each top-ranked pick.
- Fall back to a deterministic sentence when the LLM is slow or unavailable.
"""
