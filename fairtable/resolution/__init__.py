"""
Group resolution engine.

Responsibilities:
- Normalize and deduplicate raw directory listings into candidates.
- Eliminate candidates that break any member's hard constraints.
- Score every surviving candidate from each member's point of view.
- Aggregate member scores into a fairness-aware ranking.
- Return a structured resolution result ready for API serialisation.
"""
