"""Layered configuration merging."""

from typing import Any, Dict, Iterable, Mapping


def merge_dicts(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
            
    return result


def merge_layers(layers: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge layers in order; later layers override earlier ones."""
    result: Dict[str, Any] = {}
    for layer in layers:
        result = merge_dicts(result, layer)
    return result
