from abc import ABCMeta, abstractmethod
from collections.abc import Iterable, Mapping


class _MultiDict(Mapping, metaclass=ABCMeta):
    """
    An immutable, ordered mapping from keys to a tuple of values.

    Keys that are equal after `_kconv` are grouped into a single entry. The entry
    keeps the spelling of the key that was seen first, and entries keep the order
    in which their keys first appeared.

    All modifications return a new instance.
    """

    def __init__(self, fields: Iterable[tuple] = ()):
        grouped: dict = {}
        for key, value in fields:
            k = self._kconv(key)
            if k in grouped:
                grouped[k][1].append(value)
            else:
                grouped[k] = (key, [value])
        self._entries = tuple((key, tuple(values)) for key, values in grouped.values())

    @classmethod
    def _from_entries(cls, entries):
        inst = cls.__new__(cls)
        inst._entries = tuple(entries)
        return inst

    def __repr__(self):
        fields = (repr(field) for field in self.fields)
        return "{cls}[{fields}]".format(cls=type(self).__name__, fields=", ".join(fields))

    @staticmethod
    @abstractmethod
    def _reduce_values(values):
        """
        If a user accesses multidict["foo"], this method
        reduces all values for "foo" to a single value that is returned.
        For example, HTTP headers are folded, whereas we will just take
        the first query parameter we found with that name.
        """

    @staticmethod
    @abstractmethod
    def _kconv(key):
        """
        This method converts a key to its canonical representation.
        For example, HTTP headers are case-insensitive, so this method returns key.lower().
        """

    def _index(self, key) -> int:
        key = self._kconv(key)
        for i, (k, _) in enumerate(self._entries):
            if self._kconv(k) == key:
                return i
        return -1

    def __getitem__(self, key):
        values = self.get_all(key)
        if not values:
            raise KeyError(key)
        return self._reduce_values(values)

    def __contains__(self, key):
        return self._index(key) >= 0

    def __iter__(self):
        for key, _ in self._entries:
            yield key

    def __len__(self):
        return len(self._entries)

    def __eq__(self, other):
        if isinstance(other, _MultiDict) and type(self) is type(other):
            return self._entries == other._entries
        return False

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self._entries)

    @property
    def fields(self) -> tuple:
        """
        All (key, value) pairs, one per value.
        """
        return tuple((key, value) for key, values in self._entries for value in values)

    def get_all(self, key) -> tuple:
        """
        Return the tuple of all values for a given key.
        If that key is not in the MultiDict, the return value will be an empty tuple.
        """
        i = self._index(key)
        if i < 0:
            return ()
        return self._entries[i][1]

    def with_all(self, key, values: Iterable):
        """
        Return a copy in which the entry for key is replaced by the given values.

        The entry keeps its position but takes the new spelling of the key.
        If there was no such entry, it is added at the end.
        """
        values = tuple(values)
        entries = list(self._entries)
        i = self._index(key)
        if i < 0:
            entries.append((key, values))
        else:
            entries[i] = (key, values)
        return self._from_entries(entries)

    def with_added(self, key, values: Iterable):
        """
        Return a copy in which the given values are appended to the entry for key.
        Values that are already present are skipped. The existing spelling of the key is kept.
        """
        i = self._index(key)
        if i < 0:
            existing_key, existing = key, ()
        else:
            existing_key, existing = self._entries[i]
        merged = list(existing)
        for value in values:
            if value not in merged:
                merged.append(value)
        entries = list(self._entries)
        if i < 0:
            entries.append((existing_key, tuple(merged)))
        else:
            entries[i] = (existing_key, tuple(merged))
        return self._from_entries(entries)

    def without(self, key):
        """
        Return a copy without the entry for key. Missing keys are ignored.
        """
        key = self._kconv(key)
        return self._from_entries(
            entry for entry in self._entries if self._kconv(entry[0]) != key
        )

    def keys(self, multi=False):
        """
        Get all keys.

        Args:
            multi(bool):
                If True, one key per value will be returned.
                If False, duplicate keys will only be returned once.
        """
        return (k for k, _ in self.items(multi))

    def values(self, multi=False):
        """
        Get all values.

        Args:
            multi(bool):
                If True, all values will be returned.
                If False, only the first value per key will be returned.
        """
        return (v for _, v in self.items(multi))

    def items(self, multi=False):
        """
        Get all (key, value) tuples.

        Args:
            multi(bool):
                If True, all (key, value) pairs will be returned
                If False, only the first (key, value) pair per unique key will be returned.
        """
        if multi:
            return self.fields
        return tuple((key, values[0]) for key, values in self._entries)

    def collect(self) -> list:
        """
        Returns a list of (key, value) tuples, where values are either
        singular if there is only one matching item for a key, or a list
        if there are more than one. The order of the keys matches the order
        in which they were first seen.
        """
        coll = []
        for key, values in self._entries:
            if len(values) == 1:
                coll.append([key, values[0]])
            else:
                coll.append([key, list(values)])
        return coll

    def groups(self) -> tuple:
        """
        The (key, values) entries.
        """
        return self._entries


class MultiDict(_MultiDict):
    """
    A case-sensitive MultiDict. Reading a key returns its first value.

    >>> q = MultiDict([("a", "1"), ("b", "2"), ("a", "3")])
    >>> q["a"], q.get_all("a")
    ("1", ("1", "3"))
    """

    def __init__(self, fields=()):
        if isinstance(fields, Mapping):
            fields = fields.items()
        super().__init__(fields)

    @staticmethod
    def _reduce_values(values):
        return values[0]

    @staticmethod
    def _kconv(key):
        return key
