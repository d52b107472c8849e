"""Core Connector Logic Module

Attribute mapping between the generic identity model (attribute bags) and
Atlassian Guard SCIM resources.

Module Structure:
    - guard/           : Low-level Atlassian Guard SCIM API client
    - attributes.py    : Uid, Name, Attribute, AttributeDelta, ConnectorObject
    - schema.py        : Declarative attribute schema, create/delta/read mappers
    - patch.py         : SCIM PATCH operation accumulator
    - models.py        : Blank vendor records, timestamp parsing
    - validators.py    : "value/type" encodings
    - users.py         : User schema and handler
    - groups.py        : Group schema, handler and member-containment search
    - filters.py       : Filter algebra and translation to vendor lookups
    - connector.py     : GuardConnector facade (schema, create, update, delete, search)

Usage Pattern:
    These modules are NOT auto-imported; import explicitly when needed:
        from guard_connector.core.connector import GuardConnector
        from guard_connector.core.filters import EqualsFilter
"""
