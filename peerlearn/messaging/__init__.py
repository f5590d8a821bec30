"""
Chat-service integration.

Responsibilities:
- Manage Stream Chat configuration and credentials.
- Report which group channels are currently active (trending feed).
- Add new group members to the group's chat channel on a best-effort basis.
"""
