"""Wire contracts for the Oso Cloud REST API."""
