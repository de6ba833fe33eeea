"""HTTP proxy forwarding JSON Cypher queries to Neo4j over Bolt."""

__version__ = "0.1.0"
