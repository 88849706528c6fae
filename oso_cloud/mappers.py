"""Mapping helpers between application values/facts and v0 wire contracts."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from oso_api.v0.schemas import FactContract, ValueContract

from .models import Arg, Value

STRING_TYPE = "String"


def value_to_contract(arg: Arg) -> ValueContract:
    """Convert a fact argument (``str``, ``Value`` or ``None``) to a ``ValueContract``.

    ``None`` and ``Value(None, None)`` encode the wildcard. A ``Value`` with
    only one of ``type``/``id`` set is rejected, as is any other argument type.
    """
    if arg is None:
        return ValueContract(type=None, id=None)
    if isinstance(arg, str):
        return ValueContract(type=STRING_TYPE, id=arg)
    if isinstance(arg, Value):
        if arg.type is None and arg.id is None:
            return ValueContract(type=None, id=None)
        if arg.type is None or arg.id is None:
            raise ValueError(
                f"Value must set both type and id, or neither (got type={arg.type!r}, id={arg.id!r})"
            )
        return ValueContract(type=str(arg.type), id=str(arg.id))
    raise TypeError(
        f"Fact arguments must be str, Value or None, not {type(arg).__name__}"
    )


def contract_to_value(contract: ValueContract) -> Arg:
    """Convert a ``ValueContract`` back to the application argument shape."""
    if contract.id is None:
        if contract.type is None:
            return None
        return Value(type=contract.type, id=None)
    if contract.type == STRING_TYPE:
        return contract.id
    return Value(type=contract.type, id=contract.id)


def value_key(contract: ValueContract) -> str:
    return f"{contract.type}:{contract.id}"


def fact_to_contract(name: str, args: Iterable[Arg]) -> FactContract:
    """Build a ``FactContract``; argument order is kept and wildcards are allowed."""
    if not isinstance(name, str):
        raise TypeError(f"Fact name must be a str, not {type(name).__name__}")
    return FactContract(predicate=name, args=[value_to_contract(a) for a in args])


def facts_to_contracts(facts: Iterable[Sequence[Any]] | None) -> list[FactContract]:
    """Convert ``[name, *args]`` facts to contracts, preserving order."""
    contracts: list[FactContract] = []
    for fact in facts or []:
        if isinstance(fact, str) or len(fact) == 0:
            raise ValueError(f"A fact must be a non-empty sequence [name, *args], got {fact!r}")
        name, *args = fact
        contracts.append(fact_to_contract(name, args))
    return contracts


def contracts_to_facts(contracts: Iterable[FactContract]) -> list[list[Any]]:
    """Convert fact contracts to ``[name, *args]`` lists, keeping order and duplicates."""
    return [
        [contract.predicate, *(contract_to_value(a) for a in contract.args)]
        for contract in contracts
    ]
