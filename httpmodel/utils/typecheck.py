import typing
from collections import abc
from types import UnionType

Type = typing.Union[
    typing.Any  # anything more elaborate really fails with mypy at the moment.
]


def check_option_type(name: str, value: typing.Any, typeinfo: Type) -> None:
    """
    Check if the provided value is an instance of typeinfo and raises a
    TypeError otherwise. This function supports only those types required for
    options and message data.
    """
    e = TypeError(f"Expected {typeinfo} for {name}, but got {type(value)}.")

    origin = typing.get_origin(typeinfo)

    if origin is typing.Union or origin is UnionType:
        for T in typing.get_args(typeinfo):
            try:
                check_option_type(name, value, T)
            except TypeError:
                pass
            else:
                return
        raise e
    elif origin is tuple:
        types = typing.get_args(typeinfo)
        if not isinstance(value, (tuple, list)):
            raise e
        if len(types) == 2 and types[1] is Ellipsis:
            for i, x in enumerate(value):
                check_option_type(f"{name}[{i}]", x, types[0])
            return
        if len(types) != len(value):
            raise e
        for i, (x, T) in enumerate(zip(value, types)):
            check_option_type(f"{name}[{i}]", x, T)
        return
    elif origin is abc.Sequence:
        T = typing.get_args(typeinfo)[0]
        if not isinstance(value, (tuple, list)):
            raise e
        for v in value:
            check_option_type(name, v, T)
    elif origin is abc.Mapping:
        K, V = typing.get_args(typeinfo)
        if not isinstance(value, abc.Mapping):
            raise e
        for k, v in value.items():
            check_option_type(f"{name} key", k, K)
            check_option_type(f"{name}[{k!r}]", v, V)
    elif typeinfo is typing.Any:
        return
    elif not isinstance(value, typeinfo):
        if typeinfo is float and isinstance(value, int):
            return
        raise e

