from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Set,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic.fields import FieldInfo

from .context import GatewaySession

log = logging.getLogger("pipedrive_mcp.core.registry")

SESSION_PARAM = "session"


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(
    package_name: str = "pipedrive_mcp.core.tools",
) -> List[ModuleType]:
    """Import all public modules under the tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        if name.rsplit(".", 1)[-1].startswith("_"):
            continue
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield coroutine functions defined in ``module`` that take ``session`` first."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != SESSION_PARAM:
            log.debug(
                "Skipping %s.%s: first parameter must be '%s'",
                module.__name__,
                func.__name__,
                SESSION_PARAM,
            )
            continue

        yield func


def iter_all_tools(modules: List[ModuleType] | None = None) -> Iterable[Callable]:
    modules = modules if modules is not None else discover_tool_modules()
    seen_names: Set[str] = set()
    for module in modules:
        for func in iter_tool_functions(module):
            if func.__name__ in seen_names:
                raise ValueError(f"Duplicate tool name detected: {func.__name__}")
            seen_names.add(func.__name__)
            yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(
    func: Callable, session_provider: Callable[[], GatewaySession]
) -> Callable:
    """Return a wrapper that injects the session and hides it from the signature."""
    original_sig = inspect.signature(func)
    # include_extras keeps Annotated[..., Field(description=...)] intact
    type_hints = get_type_hints(func, include_extras=True)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == SESSION_PARAM:
            continue
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        session = session_provider()
        return await func(session, *args, **kwargs)

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    session_provider: Callable[[], GatewaySession] | GatewaySession,
    modules: List[ModuleType] | None = None,
) -> List[str]:
    """Register discovered tools on an app that exposes a .tool decorator."""
    if isinstance(session_provider, GatewaySession):
        _session = session_provider

        def session_provider():
            return _session

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    registered: List[str] = []
    for func in iter_all_tools(modules):
        wrapped = _wrap_tool(func, session_provider)
        app.tool(name=func.__name__)(wrapped)
        registered.append(func.__name__)
        log.info("Registered tool: %s (%s)", func.__name__, func.__module__)
    return registered


# --- Self-description ------------------------------------------------------ #


def _describe_param(name: str, annotation: Any, default: Any) -> Dict[str, Any]:
    description = ""
    if get_origin(annotation) is Annotated:
        for meta in get_args(annotation)[1:]:
            if isinstance(meta, FieldInfo) and meta.description:
                description = meta.description
    return {
        "name": name,
        "description": description,
        "required": default is inspect.Parameter.empty,
    }


def describe_tool(func: Callable) -> Dict[str, Any]:
    sig = inspect.signature(func)
    hints = get_type_hints(func, include_extras=True)
    parameters = [
        _describe_param(name, hints.get(name, param.annotation), param.default)
        for i, (name, param) in enumerate(sig.parameters.items())
        if not (i == 0 and name == SESSION_PARAM)
    ]
    return {
        "name": func.__name__,
        "description": inspect.getdoc(func) or "",
        "parameters": parameters,
    }


def describe_tools(modules: List[ModuleType] | None = None) -> Dict[str, Any]:
    """Self-description document listing every tool method and its parameters."""
    return {
        "tools": [
            {
                "name": "pipedrive",
                "description": "Pipedrive CRM tools",
                "methods": [describe_tool(f) for f in iter_all_tools(modules)],
            }
        ]
    }


__all__ = [
    "discover_tool_modules",
    "iter_tool_functions",
    "iter_all_tools",
    "register_discovered_tools",
    "describe_tool",
    "describe_tools",
]
