"""Process-wide key-value settings store and environment-aware config loading.

``load_settings`` validates the contents of a TOML config file against its
model with pydantic-settings, letting environment variables override file
values. A variable named ``<PREFIX>_P2P_LADDR`` overrides ``p2p.laddr``;
section and field names may themselves contain underscores
(``BEACOND_BEACON_KIT_ENGINE_RPC_TIMEOUT``). Values are converted and
validated by the model, so an override the field cannot accept fails
validation instead of being dropped.

``SettingsStore`` holds the validated configuration under dotted keys
(``p2p.laddr``) for commands and providers that read it later.
"""

from __future__ import annotations

import copy
import os
from collections.abc import Iterator, Mapping
from functools import lru_cache
from threading import RLock
from typing import Any, TypeVar, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

_MISSING = object()
_COMPLEX_ORIGINS = (list, dict, set, tuple)


def flatten(data: Mapping[str, Any], parent: str = "") -> dict[str, Any]:
    """Flatten a nested mapping into dotted keys.

    >>> flatten({"p2p": {"laddr": "tcp://0.0.0.0:26656"}})
    {'p2p.laddr': 'tcp://0.0.0.0:26656'}
    """
    items: dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, Mapping):
            items.update(flatten(value, dotted))
        else:
            items[dotted] = value
    return items


def _model_type(annotation: Any) -> type[BaseModel] | None:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _is_complex(annotation: Any) -> bool:
    return (
        _model_type(annotation) is not None
        or annotation in _COMPLEX_ORIGINS
        or get_origin(annotation) in _COMPLEX_ORIGINS
    )


def _field_path(model: type[BaseModel], name: str) -> list[tuple[str, FieldInfo]] | None:
    """Resolve an underscore-joined name to the chain of fields it addresses."""
    fields = model.model_fields
    if name in fields:
        return [(name, fields[name])]
    # Longest names first so ``beacon_kit_engine`` picks ``beacon_kit`` over ``beacon``.
    for field_name in sorted(fields, key=len, reverse=True):
        nested = _model_type(fields[field_name].annotation)
        if nested is None or not name.startswith(f"{field_name}_"):
            continue
        rest = _field_path(nested, name[len(field_name) + 1 :])
        if rest is not None:
            return [(field_name, fields[field_name]), *rest]
    return None


class PrefixedEnvSettingsSource(PydanticBaseSettingsSource):
    """Environment source mapping ``<env_prefix><SECTION>_<FIELD>`` onto nested models.

    Unlike the stock environment source, which needs an explicit nesting
    delimiter, names are resolved against the model's fields. Variables that
    address no field are ignored. Values for list, dict or model fields are
    decoded as JSON.
    """

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self.env_prefix = str(self.config.get("env_prefix") or "").upper()
        self.env_vars: dict[str, str] = (
            {
                key.upper(): value
                for key, value in os.environ.items()
                if key.upper().startswith(self.env_prefix)
            }
            if self.env_prefix
            else {}
        )

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        value = self.env_vars.get(f"{self.env_prefix}{field_name.upper()}")
        return value, field_name, _model_type(field.annotation) is not None

    def __call__(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for env_name in sorted(self.env_vars):
            path = _field_path(self.settings_cls, env_name[len(self.env_prefix) :].lower())
            if path is None:
                continue
            *parents, (leaf_name, leaf) = path
            target = data
            for parent_name, _ in parents:
                target = target.setdefault(parent_name, {})
                if not isinstance(target, dict):
                    raise SettingsError(f"{env_name} conflicts with the override of {parent_name}")
            target[leaf_name] = self._prepare(env_name, leaf_name, leaf)
        return data

    def _prepare(self, env_name: str, field_name: str, field: FieldInfo) -> Any:
        raw = self.env_vars[env_name]
        if not _is_complex(field.annotation):
            return raw
        try:
            return self.decode_complex_value(field_name, field, raw)
        except ValueError as exc:
            raise SettingsError(f"error parsing value for {env_name}: {exc}") from exc

    def __repr__(self) -> str:
        return f"PrefixedEnvSettingsSource(env_prefix={self.env_prefix!r})"


def settings_class(model: type[ModelT], env_prefix: str) -> type[BaseSettings]:
    """Return a settings class that loads ``model`` with ``<env_prefix>_*`` overrides.

    Keyword arguments passed to the class are the lowest-priority source, so
    values read from a file are overridden by the environment.
    """
    prefix = f"{env_prefix}_" if env_prefix else ""

    class ModelSettings(BaseSettings, model):  # type: ignore[misc,valid-type]
        model_config = SettingsConfigDict(
            env_prefix=prefix,
            extra=model.model_config.get("extra") or "ignore",
        )

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (PrefixedEnvSettingsSource(settings_cls), init_settings)

    ModelSettings.__name__ = f"{model.__name__}Settings"
    ModelSettings.__qualname__ = ModelSettings.__name__
    return ModelSettings


def load_settings(model: type[ModelT], data: Mapping[str, Any], env_prefix: str) -> ModelT:
    """Validate ``data`` as ``model`` with environment overrides applied.

    Raises:
        pydantic.ValidationError: If the merged values do not validate.
        pydantic_settings.SettingsError: If an override cannot be decoded.
    """
    loaded = settings_class(model, env_prefix)(**data)
    return model.model_validate(loaded.model_dump())


class SettingsStore:
    """Nested key-value store with dotted-key access.

    Example:
        >>> store = SettingsStore()
        >>> store.merge({"p2p": {"laddr": "tcp://0.0.0.0:26656"}})
        >>> store.get("p2p.laddr")
        'tcp://0.0.0.0:26656'
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = RLock()

    def merge(self, data: Mapping[str, Any]) -> None:
        """Deep-merge ``data`` into the store; later values win."""
        with self._lock:
            _deep_merge(self._data, data)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            node = self._data
            *parents, leaf = key.split(".")
            for part in parents:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            node[leaf] = value

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def is_set(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def all_settings(self) -> dict[str, Any]:
        """Return a nested copy of every stored key."""
        with self._lock:
            return copy.deepcopy(self._data)

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(flatten(self._data)))

    def _lookup(self, key: str) -> Any:
        with self._lock:
            node: Any = self._data
            for part in key.split("."):
                if not isinstance(node, dict) or part not in node:
                    return _MISSING
                node = node[part]
            return copy.deepcopy(node)

    def __repr__(self) -> str:
        return f"SettingsStore(keys={len(flatten(self._data))})"


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        elif isinstance(value, Mapping):
            target[key] = {}
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStore:
    """Return the process-wide settings store."""
    return SettingsStore()


__all__ = [
    "PrefixedEnvSettingsSource",
    "SettingsStore",
    "flatten",
    "get_settings_store",
    "load_settings",
    "settings_class",
]
