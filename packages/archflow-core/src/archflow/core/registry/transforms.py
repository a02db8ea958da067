from __future__ import annotations
from typing import Dict, Type

_TRANSFORM_REGISTRY: Dict[str, Type] = {}


def register_transformation(kind: str):
    def deco(cls):
        _TRANSFORM_REGISTRY[kind] = cls
        return cls
    return deco


def get_transformation(kind: str):
    if kind not in _TRANSFORM_REGISTRY:
        raise KeyError(f"Unknown transformation type: {kind}. Loaded: {sorted(_TRANSFORM_REGISTRY.keys())}")
    return _TRANSFORM_REGISTRY[kind]


def has_transformation(kind: str) -> bool:
    return kind in _TRANSFORM_REGISTRY


def list_transformations() -> list[str]:
    return sorted(_TRANSFORM_REGISTRY.keys())
