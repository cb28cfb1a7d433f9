"""
Envelope parsing for Phorest API responses

The Phorest API is inconsistent about where it puts collections: HAL style
``_embedded.<plural>``, a bare ``<plural>`` field, or a bare JSON array.
"""
from typing import Any, List


def extract_list(payload: Any, *keys: str) -> List[Any]:
    """
    Pull a list of records out of any known envelope shape.

    Priority order:
        1. ``payload['_embedded'][key]`` for each key in order
        2. ``payload[key]`` for each key in order
        3. ``payload`` itself when it is a list
        4. an empty list

    Args:
        payload: Decoded JSON response
        *keys: Candidate collection names, most specific first

    Returns:
        list: The records found, never None

    Examples:
        >>> extract_list({'_embedded': {'staffs': [{'staffId': 'S1'}]}}, 'staffs', 'staff')
        [{'staffId': 'S1'}]
        >>> extract_list([{'clientId': 'C1'}], 'clients')
        [{'clientId': 'C1'}]
        >>> extract_list({'page': {}}, 'clients')
        []
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []

    embedded = payload.get('_embedded')
    if isinstance(embedded, dict):
        for key in keys:
            value = embedded.get(key)
            if isinstance(value, list):
                return value

    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return value

    return []
