"""
Snapshot lookups — pure functions only.

A snapshot is the bundle returned by queries/records.fetch_snapshot:
{persons, resource_specifications, economic_resources, commitments}.
Lookups return None for unknown ids instead of raising.
"""
from __future__ import annotations


def _find(records: list[dict], record_id: str | None) -> dict | None:
    if not record_id:
        return None
    return next((r for r in records if r["id"] == record_id), None)


def person_by_id(snapshot: dict, person_id: str | None) -> dict | None:
    return _find(snapshot.get("persons", []), person_id)


def resource_by_id(snapshot: dict, resource_id: str | None) -> dict | None:
    return _find(snapshot.get("economic_resources", []), resource_id)


def spec_by_id(snapshot: dict, spec_id: str | None) -> dict | None:
    return _find(snapshot.get("resource_specifications", []), spec_id)


def spec_for_resource(snapshot: dict, resource: dict) -> dict | None:
    return spec_by_id(snapshot, resource.get("conforms_to"))


def role_names(person: dict) -> list[str]:
    return [r.get("role_name") or "" for r in person.get("roles") or []]


def person_location(person: dict) -> str:
    return (person.get("private_data") or {}).get("location") or ""
