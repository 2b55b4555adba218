"""Dashboard pages: login, SMS panel, profile and placeholder panels."""
