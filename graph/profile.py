"""Profile record shown on the My Profile panel."""

from __future__ import annotations

from typing import Any

# Graph attribute -> profile field
_GRAPH_FIELDS = {
    "id": "id",
    "displayName": "displayName",
    "givenName": "givenName",
    "surname": "surname",
    "jobTitle": "jobTitle",
    "officeLocation": "officeLocation",
    "userPrincipalName": "userPrincipalName",
}


def merge_profile(base: dict[str, Any] | None, graph: dict[str, Any] | None) -> dict[str, Any]:
    """
    Overlay Graph `/me` attributes on a partial record from Teams/MSAL.

    Empty Graph values never overwrite what the base record already has.
    """

    profile = dict(base or {})
    graph = graph or {}

    for src, dest in _GRAPH_FIELDS.items():
        val = graph.get(src)
        if val:
            profile[dest] = val

    if not profile.get("userPrincipalName") and graph.get("mail"):
        profile["userPrincipalName"] = graph["mail"]
    if graph.get("mail"):
        profile["mail"] = graph["mail"]

    phones = graph.get("businessPhones") or []
    phone = graph.get("mobilePhone") or (phones[0] if phones else None)
    if phone:
        profile["phoneNumber"] = phone

    return profile


def graph_email(graph: dict[str, Any]) -> str | None:
    """The identifier used for the domain check: UPN, falling back to mail."""

    for key in ("userPrincipalName", "mail"):
        val = graph.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None
