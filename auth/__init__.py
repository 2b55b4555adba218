"""
Authentication package for the KAPCHA dashboard.

This package implements Microsoft Entra ID sign-in via MSAL (OAuth2
Authorization Code Flow for browsers, Teams SSO + On-Behalf-Of inside
Microsoft Teams) and the organizational domain allowlist check.
"""
