"""Atlassian Guard identity connector.

To run operations against a directory:
    from guard_connector.config import load_settings
    from guard_connector.core.connector import GuardConnector

    connector = GuardConnector(load_settings())
"""

__version__ = "0.1.0"
