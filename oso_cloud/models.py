"""
Application-facing value types for the Oso Cloud client.

Fact arguments take one of three shapes:

- ``str``: shorthand for a ``Value`` of type ``"String"``
- ``Value``: a typed reference to an application object
- ``None``: a wildcard that matches any value (only meaningful in reads and
  deletes)

A fact is a sequence whose first element is the fact name, followed by its
arguments, e.g. ``["has_role", Value("User", "bob"), "owner", repo]``.
"""

from dataclasses import dataclass
from typing import Any, Sequence, Union


@dataclass(frozen=True)
class Value:
    """An object in your application, identified by a type and an id.

    Both fields are sent to Oso Cloud as strings. ``id`` is only ``None`` on
    values decoded from a server response that names a type without an id.
    """
    type: Any
    id: Any = None


Arg = Union[str, Value, None]
Fact = Sequence[Any]  # [name, *args]
