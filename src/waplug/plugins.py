"""Discovery and indexing of command plugins kept on disk.

Layout of the plugin root::

    plugins/
        <category folder>/
            <name>.py

Each module must define an async ``run(ctx, event, parsed)`` and a ``command``
(a string or a list of strings). ``tags``, ``owner``, ``premium``, ``prefix``
and ``desc`` are optional metadata.
"""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from .logging import get_logger

if TYPE_CHECKING:
    from .context import AppContext
    from .events import IncomingEvent
    from .parse import ParsedCommand

logger = get_logger(__name__)

DEFAULT_TAG = "Uncategorized"
PLUGIN_SUFFIX = ".py"
MODULE_PREFIX = "waplug_plugins"

type PluginHandler = Callable[
    ["AppContext", "IncomingEvent", "ParsedCommand"], Awaitable[None] | None
]


class PluginLoadFailed(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class PluginLoadError:
    name: str
    path: Path
    error: str


@dataclass(frozen=True, slots=True)
class Plugin:
    name: str
    command: tuple[str, ...]
    run: PluginHandler
    tags: str = DEFAULT_TAG
    owner: bool = False
    premium: bool = False
    prefix: bool = True
    description: str | None = None
    path: Path | None = None

    def handles(self, command_text: str) -> bool:
        if not command_text:
            return False
        return command_text in self.command


@dataclass(frozen=True, slots=True)
class LoadReport:
    loaded: int
    errors: int
    messages: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.errors == 0


def _normalize_commands(value: Any, *, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        commands: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple)):
        commands = value
    else:
        raise PluginLoadFailed(
            f"plugin {name!r} must define `command` as a string or a list of strings"
        )
    normalized: list[str] = []
    for item in commands:
        if not isinstance(item, str) or not item.strip():
            raise PluginLoadFailed(
                f"plugin {name!r} has an invalid command entry {item!r}"
            )
        normalized.append(item.strip().lower())
    return tuple(normalized)


def _flag(module: ModuleType, attr: str, default: bool) -> bool:
    value = getattr(module, attr, default)
    if value is None:
        return default
    return bool(value)


def plugin_from_module(name: str, module: ModuleType, path: Path | None = None) -> Plugin | None:
    """Build a :class:`Plugin` from an imported module, or ``None`` if it has no ``run``."""
    run = getattr(module, "run", None)
    if run is None or not callable(run):
        return None
    commands = _normalize_commands(getattr(module, "command", None), name=name)
    tags = getattr(module, "tags", None)
    if not isinstance(tags, str) or not tags.strip():
        tags = DEFAULT_TAG
    description = getattr(module, "desc", None)
    return Plugin(
        name=name,
        command=commands,
        run=run,
        tags=tags,
        owner=_flag(module, "owner", False),
        premium=_flag(module, "premium", False),
        prefix=_flag(module, "prefix", True),
        description=description if isinstance(description, str) else None,
        path=path,
    )


def import_plugin_module(path: Path) -> ModuleType:
    module_name = f"{MODULE_PREFIX}.{path.parent.name}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadFailed(f"could not load spec for {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except SystemExit as exc:
        sys.modules.pop(module_name, None)
        raise PluginLoadFailed(
            f"plugin exited during import with code {exc.code!r}"
        ) from exc
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def discover_plugin_files(root: Path) -> list[Path]:
    """Plugin files one level below ``root``, in a stable order."""
    files: list[Path] = []
    for folder in sorted(p for p in root.iterdir() if p.is_dir()):
        if folder.name.startswith(("_", ".")):
            continue
        for path in sorted(folder.iterdir()):
            if not path.is_file() or path.suffix != PLUGIN_SUFFIX:
                continue
            if path.name.startswith("_"):
                continue
            files.append(path)
    return files


class PluginRegistry:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.plugins: dict[str, Plugin] = {}
        self.categories: dict[str, list[tuple[str, ...]]] = {}
        self.load_errors: list[PluginLoadError] = []

    def __len__(self) -> int:
        return len(self.plugins)

    def __contains__(self, name: object) -> bool:
        return name in self.plugins

    def clear(self) -> None:
        self.plugins.clear()
        self.categories.clear()
        self.load_errors.clear()

    def register(self, plugin: Plugin) -> None:
        previous = self.plugins.get(plugin.name)
        if previous is not None:
            logger.warning(
                "plugins.name_collision",
                name=plugin.name,
                previous=str(previous.path) if previous.path else None,
                replacement=str(plugin.path) if plugin.path else None,
            )
            self._drop_category_entry(previous)
        self.plugins[plugin.name] = plugin
        self.categories.setdefault(plugin.tags, []).append(plugin.command)

    def _drop_category_entry(self, plugin: Plugin) -> None:
        entries = self.categories.get(plugin.tags)
        if not entries:
            return
        try:
            entries.remove(plugin.command)
        except ValueError:
            return
        if not entries:
            del self.categories[plugin.tags]

    def get(self, name: str) -> Plugin | None:
        return self.plugins.get(name)

    def find_command(self, command_text: str, *, prefixed: bool = True) -> Plugin | None:
        if not command_text:
            return None
        for plugin in self.plugins.values():
            if plugin.prefix is prefixed and plugin.handles(command_text):
                return plugin
        return None

    def load(self) -> LoadReport:
        """Rescan the plugin root, replacing everything registered so far."""
        self.clear()
        if not self.root.is_dir():
            logger.warning("plugins.root_missing", root=str(self.root))
            return LoadReport(loaded=0, errors=0, messages=[])

        loaded = 0
        messages: list[str] = []
        for path in discover_plugin_files(self.root):
            try:
                module = import_plugin_module(path)
                plugin = plugin_from_module(path.stem, module, path)
            except Exception as exc:
                message = f"failed to load plugin {path.name}: {exc}"
                messages.append(message)
                self.load_errors.append(
                    PluginLoadError(name=path.stem, path=path, error=str(exc))
                )
                continue
            if plugin is None:
                logger.debug("plugins.skipped", path=str(path), reason="no run handler")
                continue
            self.register(plugin)
            loaded += 1

        report = LoadReport(loaded=loaded, errors=len(messages), messages=messages)
        if report.ok:
            logger.info("plugins.loaded", count=loaded, root=str(self.root))
        else:
            for error in self.load_errors:
                logger.error("plugins.load_failed", name=error.name, error=error.error)
            logger.warning(
                "plugins.partial",
                loaded=loaded,
                failed=report.errors,
                root=str(self.root),
            )
        return report

    def summary(self, report: LoadReport) -> str:
        if report.ok:
            return f"{report.loaded} plugins loaded."
        lines = list(report.messages)
        lines.append(f"{report.loaded} plugins loaded, {report.errors} failed.")
        return "\n".join(lines)
