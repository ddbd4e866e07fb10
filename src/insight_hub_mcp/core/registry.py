from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import (
    Callable,
    Collection,
    Iterable,
    List,
    Optional,
    Set,
    get_type_hints,
)

from .context import apply_request_id, get_request_id, reset_request_id
from .observability import report_error
from .resolver import ProjectResolver

log = logging.getLogger("insight_hub_mcp.core.registry")

INJECTED_PARAM = "resolver"

RequestIdProvider = Callable[[], Optional[str]]


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(
    package_name: str = "insight_hub_mcp.core.tools",
) -> List[ModuleType]:
    """Import all modules under the given tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield public coroutine functions whose first parameter is `resolver`."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != INJECTED_PARAM:
            log.debug(
                "Skipping %s.%s: first parameter must be '%s'",
                module.__name__,
                func.__name__,
                INJECTED_PARAM,
            )
            continue

        yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(
    func: Callable,
    resolver_provider: Callable[[], ProjectResolver],
    request_id_provider: RequestIdProvider = get_request_id,
) -> Callable:
    """
    Return a wrapper that injects the resolver, hides it from the signature,
    tags the call with a request id and reports any error before re-raising.
    """
    original_sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == INJECTED_PARAM:
            continue  # drop injected resolver
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        # Reuse an id bound by the transport, else start a new one.
        token = apply_request_id(request_id_provider())
        try:
            return await func(resolver_provider(), *args, **kwargs)
        except Exception as exc:
            report_error(exc, tool=func.__name__)
            raise
        finally:
            reset_request_id(token)

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    resolver_provider: Callable[[], ProjectResolver] | ProjectResolver,
    modules: List[ModuleType] | None = None,
    *,
    exclude: Collection[str] = (),
    request_id_provider: RequestIdProvider = get_request_id,
) -> List[str]:
    """
    Register discovered tools on an app that exposes a .tool decorator.
    `request_id_provider` supplies the id each call is tagged with; transports
    whose handlers run outside the request context pass their own.
    """
    if isinstance(resolver_provider, ProjectResolver):
        _resolver = resolver_provider

        def resolver_provider():
            return _resolver

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    modules = modules or discover_tool_modules()
    seen_names: Set[str] = set()

    for module in modules:
        for func in iter_tool_functions(module):
            name = func.__name__
            if name in exclude:
                log.info("Skipping excluded tool: %s", name)
                continue
            if name in seen_names:
                raise ValueError(f"Duplicate tool name detected: {name}")

            wrapped = _wrap_tool(func, resolver_provider, request_id_provider)
            app.tool(name=name)(wrapped)
            seen_names.add(name)
            log.info("Registered tool: %s (%s)", name, module.__name__)

    return sorted(seen_names)


__all__ = [
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
    "INJECTED_PARAM",
    "RequestIdProvider",
]
