"""v0 contract schemas for the Oso Cloud REST API."""

__version__ = "0.1.0"

API_VERSION = "0"

from .schemas import (
    ActionsRequest,
    ActionsResponse,
    ApiResult,
    AuthorizeRequest,
    AuthorizeResourcesRequest,
    AuthorizeResourcesResponse,
    AuthorizeResponse,
    BulkRequest,
    FactContract,
    GetPolicyResponse,
    ListRequest,
    ListResponse,
    PolicyContract,
    QueryRequest,
    QueryResponse,
    StatsResponse,
    ValueContract,
)

__all__ = [
    "__version__",
    "API_VERSION",
    "ActionsRequest",
    "ActionsResponse",
    "ApiResult",
    "AuthorizeRequest",
    "AuthorizeResourcesRequest",
    "AuthorizeResourcesResponse",
    "AuthorizeResponse",
    "BulkRequest",
    "FactContract",
    "GetPolicyResponse",
    "ListRequest",
    "ListResponse",
    "PolicyContract",
    "QueryRequest",
    "QueryResponse",
    "StatsResponse",
    "ValueContract",
]
