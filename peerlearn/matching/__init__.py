"""
Peer matching engine.

Responsibilities:
- Accept the requesting user's profile and a pool of candidate profiles.
- Score each candidate from semantic text similarity plus heuristic bonuses.
- Drop weak candidates and return the rest best-first.
"""
