"""Python client for the Oso Cloud authorization service."""

__version__ = "0.1.0"

from .config import ClientSettings, load_settings
from .core_client import (
    ApiError,
    CoreClient,
    TransportError,
    TransportResponse,
    urllib_transport,
)
from .facade import Oso
from .mappers import (
    contract_to_value,
    contracts_to_facts,
    fact_to_contract,
    facts_to_contracts,
    value_to_contract,
)
from .models import Value

__all__ = [
    "__version__",
    "ApiError",
    "ClientSettings",
    "CoreClient",
    "Oso",
    "TransportError",
    "TransportResponse",
    "Value",
    "contract_to_value",
    "contracts_to_facts",
    "fact_to_contract",
    "facts_to_contracts",
    "load_settings",
    "urllib_transport",
    "value_to_contract",
]
