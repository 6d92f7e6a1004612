"""
Protocol - JSON-RPC envelope, relay payload models and their JSON Schemas.

Schemas live under ``v1/`` and are validated with jsonschema.
"""
