"""Plugin discovery.

A plugin is any module that registers transformations or connectors when it
is imported (``@register_transformation``/``@register_connector``). Two
sources are scanned:

- installed distributions exposing the ``archflow.plugins`` entry point group
- ``.py`` files under ``settings.plugin_paths`` (files starting with ``_`` are skipped)

With ``plugin_strict`` a failing plugin raises PluginError; otherwise it is
logged and skipped.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from importlib.metadata import entry_points
from pathlib import Path
from typing import Iterator, List

from archflow.core.exception import PluginError

log = logging.getLogger("archflow.core.plugins")

ENTRY_POINT_GROUP = "archflow.plugins"
_MODULE_PREFIX = "archflow_user_plugin_"


def _fail(msg: str, *, strict: bool, cause: BaseException | None = None) -> None:
    if strict:
        raise PluginError(msg) from cause
    log.warning(f"{msg}; continuing", exc_info=cause is not None)


def load_plugins_from_entrypoints(group: str = ENTRY_POINT_GROUP, *, strict: bool = True) -> List[str]:
    loaded: List[str] = []
    try:
        eps = list(entry_points().select(group=group))
    except Exception as e:
        _fail(f"Failed reading entry points for group={group}: {e}", strict=strict, cause=e)
        return loaded
    for ep in eps:
        try:
            target = ep.load()
            # Importing the module is usually enough; a callable or register() hook is optional.
            if callable(target):
                target()
            elif hasattr(target, "register"):
                target.register()
        except Exception as e:
            _fail(f"Failed loading entry point plugin {ep.name}: {e}", strict=strict, cause=e)
            continue
        loaded.append(ep.name)
    return loaded


def _plugin_files(root: Path) -> Iterator[Path]:
    if root.is_file():
        yield root
        return
    yield from (p for p in sorted(root.rglob("*.py")) if not p.name.startswith("_"))


def _exec_file(py: Path) -> str:
    mod_name = _MODULE_PREFIX + "_".join(py.with_suffix("").parts[-4:])
    spec = importlib.util.spec_from_file_location(mod_name, py)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot build an import spec for {py}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod_name


def load_plugins_from_paths(paths: List[str], *, strict: bool = True) -> List[str]:
    loaded: List[str] = []
    for raw in paths:
        if not raw:
            continue
        root = Path(raw).expanduser().resolve()
        if not root.exists():
            _fail(f"Plugin path not found: {root}", strict=strict)
            continue
        # Let plugin files import their sibling helpers.
        base = str(root if root.is_dir() else root.parent)
        if base not in sys.path:
            sys.path.insert(0, base)
        for py in _plugin_files(root):
            try:
                loaded.append(_exec_file(py))
            except Exception as e:
                _fail(f"Failed loading plugin file: {py}: {e}", strict=strict, cause=e)
    return loaded


def load_all_plugins(*, settings) -> List[str]:
    loaded = load_plugins_from_entrypoints(strict=settings.plugin_strict)
    loaded += load_plugins_from_paths(settings.plugin_paths, strict=settings.plugin_strict)
    if loaded:
        log.info(f"loaded plugins: {', '.join(loaded)}")
    return loaded
