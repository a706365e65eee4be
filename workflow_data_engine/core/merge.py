"""Combine the outputs of several upstream nodes into one payload."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Union

from ..models import MergeStrategy
from ..utils.values import deep_merge

logger = logging.getLogger(__name__)


def _combine(sources: List[Dict[str, Any]]) -> Dict[str, Any]:
    combined: Dict[str, Any] = {}
    for source in sources:
        for key, value in source.items():
            if key not in combined:
                combined[key] = value
            elif isinstance(combined[key], list):
                # the slot may hold a list taken from the first source; never mutate it
                combined[key] = [*combined[key], value]
            else:
                combined[key] = [combined[key], value]
    return combined


def _objects(sources: List[Any], strategy: str) -> List[Dict[str, Any]]:
    objects = [source for source in sources if isinstance(source, dict)]
    if len(objects) != len(sources):
        logger.warning(
            f"Skipping {len(sources) - len(objects)} non-object sources for '{strategy}' merge"
        )
    return objects


def merge_data(
    sources: List[Any],
    strategy: Union[MergeStrategy, str] = MergeStrategy.OVERWRITE,
) -> Any:
    """Merge ``sources`` left to right.

    - overwrite: shallow update, later sources win
    - combine: repeated keys accumulate into a list
    - array: the sources list itself
    - deep: nested dicts merge recursively, other values overwrite

    Sources that are not dicts (lists, numbers...) only take part in the
    array strategy; the others skip them.
    """
    if not sources:
        return {}
    if len(sources) == 1:
        return sources[0]

    strategy = strategy.value if isinstance(strategy, MergeStrategy) else str(strategy)

    if strategy == MergeStrategy.ARRAY.value:
        return sources
    if strategy == MergeStrategy.COMBINE.value:
        return _combine(_objects(sources, strategy))
    if strategy == MergeStrategy.DEEP.value:
        return deep_merge(*_objects(sources, strategy))
    if strategy != MergeStrategy.OVERWRITE.value:
        logger.warning(f"Unknown merge strategy '{strategy}', falling back to overwrite")

    merged: Dict[str, Any] = {}
    for source in _objects(sources, MergeStrategy.OVERWRITE.value):
        merged.update(source)
    return merged


__all__ = ["merge_data"]
