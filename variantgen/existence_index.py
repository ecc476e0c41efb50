"""
Existence index - which preset variants each asset already has.
"""

from collections import OrderedDict
from typing import Dict, FrozenSet, Set, Tuple


def build_existence_index(repository) -> 'OrderedDict[str, FrozenSet[Tuple[str, str]]]':
    """
    Snapshot the (preset, variant) identities of every asset.

    Built from one bulk query. Keys are in ascending identifier order, and
    assets without variants map to an empty set. Not updated afterwards.
    """
    raw: Dict[str, Set[Tuple[str, str]]] = repository.find_asset_identifiers_with_variants()
    return OrderedDict(
        (identifier, frozenset(raw[identifier]))
        for identifier in sorted(raw)
    )
