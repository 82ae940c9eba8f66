"""Typed dependency resolution for node assembly.

A ``Config`` is an ordinary, inspectable registry: values supplied up front
(keyed by their type) and provider callables (keyed by their return
annotation). ``inject`` resolves a list of requested types against it and
either returns every value or raises ``ResolutionError``; callers never see a
partially populated result.

Example:
    >>> def provide_greeting(name: str) -> bytes:
    ...     return f"hello {name}".encode()
    >>> cfg = configs(supply("node"), provide(provide_greeting))
    >>> inject(cfg, bytes)
    (b'hello node',)
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from nodekit.common.logging import get_logger
from nodekit.errors import ResolutionError

logger = get_logger(__name__)

Provider = Callable[..., Any]


@dataclass(frozen=True)
class Config:
    """Supplied values and providers to resolve against.

    Configs are immutable; combine them with :func:`configs`.
    """

    supplies: tuple[Any, ...] = ()
    providers: tuple[Provider, ...] = ()


@dataclass
class _Registry:
    values: dict[type, Any] = field(default_factory=dict)
    providers: dict[type, Provider] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Config) -> _Registry:
        registry = cls()
        for value in config.supplies:
            key = type(value)
            if key in registry.values or key in registry.providers:
                raise ResolutionError(
                    f"duplicate value for {_type_name(key)}: already registered",
                    dependency=key,
                )
            registry.values[key] = value
        for provider in config.providers:
            key = _output_type(provider)
            if key in registry.values or key in registry.providers:
                existing = registry.providers.get(key)
                owner = _provider_name(existing) if existing else "a supplied value"
                raise ResolutionError(
                    f"duplicate provider for {_type_name(key)}: {_provider_name(provider)} "
                    f"conflicts with {owner}",
                    dependency=key,
                    provider=_provider_name(provider),
                )
            registry.providers[key] = provider
        return registry

    def keys(self) -> Iterable[type]:
        yield from self.values
        yield from self.providers

    def match(self, requested: type) -> type | None:
        """Return the registered key satisfying ``requested``, if any."""
        if requested in self.values or requested in self.providers:
            return requested

        candidates = [key for key in self.keys() if _is_subtype(key, requested)]
        if len(candidates) > 1:
            names = ", ".join(sorted(_type_name(c) for c in candidates))
            raise ResolutionError(
                f"ambiguous dependency {_type_name(requested)}: matched {names}",
                dependency=requested,
            )
        return candidates[0] if candidates else None


def supply(*values: Any) -> Config:
    """Register constant values, keyed by their concrete type."""
    return Config(supplies=tuple(values))


def provide(*providers: Provider) -> Config:
    """Register provider callables, keyed by their return annotation."""
    return Config(providers=tuple(providers))


def configs(*cfgs: Config) -> Config:
    """Merge several configs in order."""
    supplies: list[Any] = []
    providers: list[Provider] = []
    for cfg in cfgs:
        supplies.extend(cfg.supplies)
        providers.extend(cfg.providers)
    return Config(supplies=tuple(supplies), providers=tuple(providers))


def inject(config: Config, *output_types: type) -> tuple[Any, ...]:
    """Resolve ``output_types`` against ``config``.

    Args:
        config: Registry of supplied values and providers.
        *output_types: Types to produce, in the order they should be returned.

    Returns:
        Tuple of resolved values in request order.

    Raises:
        ResolutionError: If any requested type, or anything it depends on,
            cannot be produced.
    """
    registry = _Registry.from_config(config)
    resolver = _Resolver(registry)
    return tuple(resolver.resolve(output_type) for output_type in output_types)


class _Resolver:
    def __init__(self, registry: _Registry) -> None:
        self._registry = registry
        self._resolved: dict[type, Any] = dict(registry.values)
        self._stack: list[type] = []

    def resolve(self, requested: type, *, required_by: Provider | None = None) -> Any:
        key = self._registry.match(requested)
        if key is None:
            detail = f" (required by {_provider_name(required_by)})" if required_by else ""
            raise ResolutionError(
                f"missing dependency {_type_name(requested)}{detail}",
                dependency=requested,
                provider=_provider_name(required_by) if required_by else None,
            )
        if key in self._resolved:
            return self._resolved[key]

        provider = self._registry.providers[key]
        if key in self._stack:
            cycle = " -> ".join(_type_name(t) for t in [*self._stack, key])
            raise ResolutionError(
                f"dependency cycle: {cycle}",
                dependency=key,
                provider=_provider_name(provider),
            )

        self._stack.append(key)
        try:
            value = self._call(provider, key)
        finally:
            self._stack.pop()

        self._resolved[key] = value
        return value

    def _call(self, provider: Provider, output: type) -> Any:
        kwargs: dict[str, Any] = {}
        for name, param, dependency, optional in _parameters(provider):
            if self._registry.match(dependency) is None:
                if param.default is not inspect.Parameter.empty:
                    kwargs[name] = param.default
                    continue
                if optional:
                    kwargs[name] = None
                    continue
            kwargs[name] = self.resolve(dependency, required_by=provider)

        logger.debug(
            "Invoking provider",
            extra={"provider": _provider_name(provider), "output": _type_name(output)},
        )
        try:
            return provider(**kwargs)
        except ResolutionError:
            raise
        except Exception as exc:
            raise ResolutionError(
                f"{_provider_name(provider)} failed to provide {_type_name(output)}: {exc}",
                dependency=output,
                provider=_provider_name(provider),
            ) from exc


def _parameters(provider: Provider) -> list[tuple[str, inspect.Parameter, Any, bool]]:
    hints = _type_hints(provider)
    params = []
    for name, param in inspect.signature(provider).parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        if annotation is inspect.Parameter.empty:
            if param.default is not inspect.Parameter.empty:
                continue
            raise ResolutionError(
                f"parameter {name!r} of {_provider_name(provider)} has no type annotation",
                provider=_provider_name(provider),
            )
        members = [m for m in _union_members(annotation) if m is not type(None)]
        optional = len(members) == 1 and _is_optional(annotation)
        params.append((name, param, members[0] if optional else annotation, optional))
    return params


def _output_type(provider: Provider) -> type:
    output = _type_hints(provider).get("return")
    if output is None or output is type(None):
        raise ResolutionError(
            f"provider {_provider_name(provider)} must declare a return type",
            provider=_provider_name(provider),
        )
    return output


def _type_hints(provider: Provider) -> dict[str, Any]:
    target = provider.__call__ if not inspect.isroutine(provider) and not inspect.isclass(provider) else provider
    if inspect.isclass(provider):
        hints = typing.get_type_hints(provider.__init__)
        hints["return"] = provider
        return hints
    try:
        return typing.get_type_hints(target)
    except NameError as exc:
        raise ResolutionError(
            f"cannot evaluate annotations of {_provider_name(provider)}: {exc}",
            provider=_provider_name(provider),
        ) from exc


def _union_members(annotation: Any) -> tuple[Any, ...]:
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return typing.get_args(annotation)
    return ()


def _is_optional(annotation: Any) -> bool:
    return type(None) in _union_members(annotation)


def _is_subtype(candidate: Any, requested: Any) -> bool:
    if not isinstance(candidate, type) or not isinstance(requested, type):
        return False
    try:
        return issubclass(candidate, requested)
    except TypeError:
        return False


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


def _provider_name(provider: Provider | None) -> str:
    if provider is None:
        return "<none>"
    return getattr(provider, "__qualname__", None) or type(provider).__qualname__


__all__ = ["Config", "Provider", "configs", "inject", "provide", "supply"]
