"""
Microsoft Graph access for the KAPCHA dashboard.

This package contains logic for:
  - exchanging a Teams SSO token for a Graph token (On-Behalf-Of)
  - reading the signed-in user's profile (`GET /me`)
  - merging Graph attributes into the profile record shown in the UI
"""
