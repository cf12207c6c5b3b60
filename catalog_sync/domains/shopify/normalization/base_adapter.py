from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel


class BaseAdapter(ABC):
    """Maps an assembled bulk export node to a canonical source model"""

    @abstractmethod
    def to_canonical(self, node: Dict[str, Any]) -> BaseModel:
        raise NotImplementedError


def child_nodes(container: Any) -> List[Dict[str, Any]]:
    """Children of a node, whether assembled as a list or left as GraphQL edges"""
    if isinstance(container, list):
        return [item for item in container if isinstance(item, dict)]
    if isinstance(container, dict):
        return [
            edge.get("node") or {}
            for edge in container.get("edges", []) or []
            if isinstance(edge, dict)
        ]
    return []


def flatten_metafields(container: Any) -> Dict[str, str]:
    """Metafield records -> {key: value}; a repeated key keeps the last value"""
    flattened: Dict[str, str] = {}
    for metafield in child_nodes(container):
        key = metafield.get("key")
        if not key:
            continue
        value = metafield.get("value")
        flattened[key] = "" if value is None else str(value)
    return flattened


def flatten_selected_options(options: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    selected: Dict[str, str] = {}
    for option in options or []:
        name = option.get("name")
        value = option.get("value")
        if name and value is not None:
            selected[name] = str(value)
    return selected
