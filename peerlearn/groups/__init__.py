"""
Group discovery.

Responsibilities:
- Rank public groups for the recommended, trending, for-you, with-friends
  and search feeds using weighted set-intersection scores.
- Project ranked groups into bounded response objects.
- Validate and apply join requests.
"""
