"""
The option store behind `httpmodel.options.Options`.

Options hold either a single string or a list of strings. They can be set
as attributes, from `name=value` specs, or from a YAML config file.
"""
from __future__ import annotations

import contextlib
import copy
import logging
import textwrap
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import ruamel.yaml

from httpmodel import exceptions
from httpmodel.utils import typecheck

logger = logging.getLogger(__name__)

OPTION_TYPES = (str, Sequence[str])

unset = object()


class _Option:
    __slots__ = ("name", "typespec", "value", "_default", "choices", "help")

    def __init__(
        self,
        name: str,
        typespec: type | object,  # object for Sequence[str], which is not a type.
        default: Any,
        help: str,
        choices: Sequence[str] | None,
    ) -> None:
        if typespec not in OPTION_TYPES:
            raise TypeError(f"Unsupported type for option {name}: {typespec}")
        typecheck.check_option_type(name, default, typespec)
        self.name = name
        self.typespec = typespec
        self._default = default
        self.value = unset
        self.help = textwrap.dedent(help).strip().replace("\n", " ")
        self.choices = choices

    def __repr__(self):
        return f"{self.current()!r} [{self.typespec}]"

    @property
    def default(self):
        return copy.deepcopy(self._default)

    def current(self) -> Any:
        if self.value is unset:
            return self.default
        return copy.deepcopy(self.value)

    def set(self, value: Any) -> None:
        try:
            typecheck.check_option_type(self.name, value, self.typespec)
        except TypeError as e:
            raise exceptions.OptionsError(str(e)) from e
        if self.choices is not None and value not in self.choices:
            raise exceptions.OptionsError(
                "Invalid value for %s: %r. Valid values are %s."
                % (self.name, value, ", ".join(repr(c) for c in self.choices))
            )
        self.value = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, _Option):
            return False
        return all(getattr(self, i) == getattr(other, i) for i in self.__slots__)

    def __deepcopy__(self, _):
        o = _Option(self.name, self.typespec, self._default, self.help, self.choices)
        o.value = self.value if self.value is unset else copy.deepcopy(self.value)
        return o


class OptManager:
    """
    Base class for `Options`.

    Options are read and written as attributes. Writing goes through `update`,
    which checks the type of every value: if one of them is invalid, an
    `OptionsError` is raised and none of the values are applied.

    Values are returned as copies, so that mutating a returned list does
    not change the option.
    """

    def __init__(self) -> None:
        # Must stay the last attribute: once _options exists, attribute
        # assignment is routed to update().
        self._options: dict[str, _Option] = {}

    def add_option(
        self,
        name: str,
        typespec: type | object,
        default: Any,
        help: str,
        choices: Sequence[str] | None = None,
    ) -> None:
        """
        Declare an option. `typespec` is either `str` or `Sequence[str]`.
        """
        self._options[name] = _Option(name, typespec, default, help, choices)

    @contextlib.contextmanager
    def rollback(self):
        old = copy.deepcopy(self._options)
        try:
            yield
        except exceptions.OptionsError:
            self.__dict__["_options"] = old
            raise

    def __eq__(self, other):
        if isinstance(other, OptManager):
            return self._options == other._options
        return False

    def __deepcopy__(self, memodict=None):
        o = type(self).__new__(type(self))
        o.__dict__["_options"] = copy.deepcopy(self._options, memodict)
        return o

    __copy__ = __deepcopy__

    def __getattr__(self, attr):
        if attr.startswith("__"):
            raise AttributeError(attr)
        if attr in self._options:
            return self._options[attr].current()
        raise AttributeError("No such option: %s" % attr)

    def __setattr__(self, attr, value):
        if not self.__dict__.get("_options"):
            super().__setattr__(attr, value)
        else:
            self.update(**{attr: value})

    def keys(self):
        return set(self._options.keys())

    def items(self):
        return self._options.items()

    def __contains__(self, k):
        return k in self._options

    def update(self, **kwargs) -> None:
        """
        Set several options at once. Either all values are applied or none is.

        Raises:
            OptionsError, if an option is unknown or a value is invalid.
        """
        unknown = [k for k in kwargs if k not in self._options]
        if unknown:
            raise exceptions.OptionsError("Unknown options: %s" % ", ".join(unknown))
        with self.rollback():
            for k, v in kwargs.items():
                self._options[k].set(v)

    def default(self, option: str) -> Any:
        return self._options[option].default

    def __repr__(self):
        options = ", ".join(f"{k}={o.current()!r}" for k, o in self._options.items())
        return f"{type(self).__module__}.{type(self).__name__}({options})"

    def set(self, *specs: str) -> None:
        """
        Apply specs in `option=value` form. A list option collects every value
        given for it, and a bare `option` clears it:
        `set("trusted_proxies=10.0.0.1", "trusted_proxies=10.0.0.2")`.

        Raises:
            OptionsError, if a value is malformed or an option is unknown.
        """
        grouped: dict[str, list[str]] = {}
        for spec in specs:
            name, sep, value = spec.partition("=")
            values = grouped.setdefault(name, [])
            if sep:
                values.append(value)

        unknown = [name for name in grouped if name not in self._options]
        if unknown:
            raise exceptions.OptionsError(f"Unknown option(s): {', '.join(unknown)}")

        self.update(
            **{
                name: self._parse_setval(self._options[name], values)
                for name, values in grouped.items()
            }
        )

    def _parse_setval(self, o: _Option, values: list[str]) -> str | list[str]:
        if o.typespec == Sequence[str]:
            return values
        if not values:
            raise exceptions.OptionsError(f"Option is required: {o.name}")
        if len(values) > 1:
            raise exceptions.OptionsError(
                f"Received multiple values for {o.name}: {values}"
            )
        return values[0]


def parse(text: str) -> dict:
    """
    Parse a YAML config into a dict of option values.
    """
    if not text:
        return {}
    try:
        yaml = ruamel.yaml.YAML(typ="safe", pure=True)
        data = yaml.load(text)
    except ruamel.yaml.error.YAMLError as v:
        if hasattr(v, "problem_mark"):
            snip = v.problem_mark.get_snippet()
            raise exceptions.OptionsError(
                "Config error at line %s:\n%s\n%s"
                % (v.problem_mark.line + 1, snip, getattr(v, "problem", ""))
            )
        raise exceptions.OptionsError("Could not parse options.")
    if data is None:
        return {}
    if isinstance(data, str):
        raise exceptions.OptionsError("Config error - no keys found.")
    if not isinstance(data, dict):
        raise exceptions.OptionsError("Config error - expected a mapping of options.")
    return data


def load(opts: OptManager, text: str) -> None:
    """
    Apply a YAML config on top of the current values.
    """
    opts.update(**parse(text))


def load_paths(opts: OptManager, *paths: Path | str) -> None:
    """
    Load config files in order, later files overriding earlier ones.
    Missing files are skipped, unreadable or invalid ones raise an OptionsError.
    """
    for p in paths:
        p = Path(p).expanduser()
        if not p.is_file():
            continue
        try:
            txt = p.read_text(encoding="utf8")
        except UnicodeDecodeError as e:
            raise exceptions.OptionsError(f"Error reading {p}: {e}")
        try:
            load(opts, txt)
        except exceptions.OptionsError as e:
            raise exceptions.OptionsError(f"Error reading {p}: {e}")
        logger.debug("Loaded options from %s", p)
