"""
Oso Cloud client.

About facts: several methods accept and return facts. A fact is a sequence
with at least one element. The first element is the fact's name (a string);
the remaining elements are its arguments, each a ``Value``, a ``str``
(shorthand for a ``Value`` of type ``"String"``) or, where noted, ``None``
as a wildcard.
"""

from __future__ import annotations

import builtins
from pathlib import Path
from typing import Any, Iterable, Sequence

from oso_api.v0.schemas import (
    ActionsRequest,
    AuthorizeRequest,
    AuthorizeResourcesRequest,
    BulkRequest,
    ListRequest,
    PolicyContract,
    QueryRequest,
    StatsResponse,
)

from .config import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_SECONDS, DEFAULT_URL, load_settings
from .core_client import CoreClient, Transport
from .mappers import (
    contracts_to_facts,
    fact_to_contract,
    facts_to_contracts,
    value_key,
    value_to_contract,
)
from .models import Arg, Fact, Value

Facts = Iterable[Fact]


class Oso:
    """Client for the Oso Cloud authorization service."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        api_key: str | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Transport | None = None,
        core_client: CoreClient | None = None,
    ):
        self.core_client = core_client or CoreClient(
            base_url=url,
            api_key=api_key,
            max_retries=max_retries,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_env(cls, env_file: str | Path | None = None, **kwargs: Any) -> "Oso":
        """Create a client from ``OSO_URL`` / ``OSO_AUTH`` and related settings."""
        settings = load_settings(env_file)
        return cls(
            settings.url,
            settings.api_key,
            max_retries=settings.max_retries,
            timeout_seconds=settings.timeout_seconds,
            **kwargs,
        )

    # --- policy ---

    def policy(self, policy: str, filename: str = "") -> None:
        """Replace the active policy with the given Polar source."""
        self.core_client.post_policy(PolicyContract(filename=filename, src=policy))

    def get_policy(self) -> PolicyContract | None:
        return self.core_client.get_policy().policy

    # --- checks ---

    def authorize(
        self,
        actor: Value,
        action: str,
        resource: Value,
        context_facts: Facts | None = None,
    ) -> bool:
        """Return True if ``actor`` may perform ``action`` on ``resource``."""
        actor_value = value_to_contract(actor)
        resource_value = value_to_contract(resource)
        result = self.core_client.post_authorize(
            AuthorizeRequest(
                actor_type=actor_value.type,
                actor_id=actor_value.id,
                action=action,
                resource_type=resource_value.type,
                resource_id=resource_value.id,
                context_facts=facts_to_contracts(context_facts),
            )
        )
        return result.allowed

    def authorize_resources(
        self,
        actor: Value,
        action: str,
        resources: Sequence[Value] | None,
        context_facts: Facts | None = None,
    ) -> builtins.list[Value]:
        """Return the subset of ``resources`` on which ``actor`` may perform ``action``.

        Order and duplicates of the input are preserved.
        """
        if not resources:
            return []

        resource_values = [value_to_contract(r) for r in resources]
        actor_value = value_to_contract(actor)
        result = self.core_client.post_authorize_resources(
            AuthorizeResourcesRequest(
                actor_type=actor_value.type,
                actor_id=actor_value.id,
                action=action,
                resources=resource_values,
                context_facts=facts_to_contracts(context_facts),
            )
        )
        if not result.results:
            return []

        allowed: set[str] = set()
        for value in result.results:
            allowed.add(value_key(value))

        return [
            resource
            for resource, value in zip(resources, resource_values)
            if value_key(value) in allowed
        ]

    def list(
        self,
        actor: Value,
        action: str,
        resource_type: str,
        context_facts: Facts | None = None,
    ) -> builtins.list[str]:
        """List ids of ``resource_type`` resources ``actor`` may perform ``action`` on."""
        actor_value = value_to_contract(actor)
        result = self.core_client.post_list(
            ListRequest(
                actor_type=actor_value.type,
                actor_id=actor_value.id,
                action=action,
                resource_type=resource_type,
                context_facts=facts_to_contracts(context_facts),
            )
        )
        return result.results

    def actions(
        self,
        actor: Value,
        resource: Value,
        context_facts: Facts | None = None,
    ) -> builtins.list[str]:
        """List the actions ``actor`` may perform on ``resource``."""
        actor_value = value_to_contract(actor)
        resource_value = value_to_contract(resource)
        result = self.core_client.post_actions(
            ActionsRequest(
                actor_type=actor_value.type,
                actor_id=actor_value.id,
                resource_type=resource_value.type,
                resource_id=resource_value.id,
                context_facts=facts_to_contracts(context_facts),
            )
        )
        return result.results

    # --- facts ---

    def tell(self, name: str, *args: Arg) -> None:
        """Add a fact."""
        self.core_client.post_facts(fact_to_contract(name, args))

    def bulk_tell(self, facts: Facts) -> None:
        self.core_client.post_bulk_load(facts_to_contracts(facts))

    def delete(self, name: str, *args: Arg) -> None:
        """Delete a fact. Deleting a fact that does not exist is not an error."""
        self.core_client.delete_facts(fact_to_contract(name, args))

    def bulk_delete(self, facts: Facts) -> None:
        self.core_client.post_bulk_delete(facts_to_contracts(facts))

    def bulk(self, delete: Facts | None = None, insert: Facts | None = None) -> None:
        """Delete and insert facts in one transaction.

        Deletions are applied before insertions. ``None`` arguments in facts
        to delete act as wildcards.
        """
        self.core_client.post_bulk(
            BulkRequest(
                delete=facts_to_contracts(delete),
                tell=facts_to_contracts(insert),
            )
        )

    def get(self, name: str, *args: Arg) -> builtins.list[builtins.list[Any]]:
        """List stored facts matching ``name`` and ``args``; ``None`` matches anything."""
        return contracts_to_facts(self.core_client.get_facts(name, list(args)))

    def query(
        self,
        name: str,
        *args: Arg,
        context_facts: Facts | None = None,
    ) -> builtins.list[builtins.list[Any]]:
        """List stored and derived facts matching ``name`` and ``args``."""
        result = self.core_client.post_query(
            QueryRequest(
                fact=fact_to_contract(name, args),
                context_facts=facts_to_contracts(context_facts),
            )
        )
        return contracts_to_facts(result.results)

    # --- admin ---

    def stats(self) -> StatsResponse:
        return self.core_client.get_stats()

    def clear_data(self) -> None:
        """Delete all facts in the environment."""
        self.core_client.clear_data()
