"""Pydantic contracts for the v0 Oso Cloud REST API."""

from pydantic import BaseModel, ConfigDict, Field


class _StrictModel(BaseModel):
    """Base model for request bodies; rejects unknown fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class _WireModel(BaseModel):
    """Base model for shapes the server sends back; ignores fields it adds."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ValueContract(_WireModel):
    type: str | None = None
    id: str | None = None

    @property
    def is_wildcard(self) -> bool:
        return self.type is None and self.id is None


class FactContract(_WireModel):
    predicate: str
    args: list[ValueContract] = Field(default_factory=list)


class PolicyContract(_WireModel):
    filename: str | None = None
    src: str


class BulkRequest(_StrictModel):
    delete: list[FactContract] = Field(default_factory=list)
    tell: list[FactContract] = Field(default_factory=list)


class AuthorizeRequest(_StrictModel):
    actor_type: str | None
    actor_id: str | None
    action: str
    resource_type: str | None
    resource_id: str | None
    context_facts: list[FactContract] = Field(default_factory=list)


class AuthorizeResourcesRequest(_StrictModel):
    actor_type: str | None
    actor_id: str | None
    action: str
    resources: list[ValueContract]
    context_facts: list[FactContract] = Field(default_factory=list)


class ListRequest(_StrictModel):
    actor_type: str | None
    actor_id: str | None
    action: str
    resource_type: str
    context_facts: list[FactContract] = Field(default_factory=list)


class ActionsRequest(_StrictModel):
    actor_type: str | None
    actor_id: str | None
    resource_type: str | None
    resource_id: str | None
    context_facts: list[FactContract] = Field(default_factory=list)


class QueryRequest(_StrictModel):
    fact: FactContract
    context_facts: list[FactContract] = Field(default_factory=list)


class ApiResult(_WireModel):
    message: str = ""


class GetPolicyResponse(_WireModel):
    policy: PolicyContract | None = None


class AuthorizeResponse(_WireModel):
    allowed: bool


class AuthorizeResourcesResponse(_WireModel):
    results: list[ValueContract] = Field(default_factory=list)


class ListResponse(_WireModel):
    results: list[str] = Field(default_factory=list)


class ActionsResponse(_WireModel):
    results: list[str] = Field(default_factory=list)


class QueryResponse(_WireModel):
    results: list[FactContract] = Field(default_factory=list)


class StatsResponse(_WireModel):
    num_roles: int = Field(ge=0)
    num_relations: int = Field(ge=0)
    num_facts: int = Field(ge=0)
