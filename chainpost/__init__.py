"""Chainpost: templated REST, GraphQL and WebSocket requests chained into flows."""

__version__ = "0.1.0"
