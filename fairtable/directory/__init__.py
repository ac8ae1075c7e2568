"""
Restaurant directory access.

Responsibilities:
- Build the set of directory queries for a room (broad, per cuisine, nearby).
- Issue them concurrently against Google Places and join the results.
- Map provider payloads into raw listings for the normalizer.
- Serve listings from a local CSV for offline deployments.
"""
