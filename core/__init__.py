"""Core module - provider-neutral models, mapping, configuration,
connections and observability.

Provider-specific logic (NetSuite, etc.) belongs in /connectors/.
"""

__version__ = "1.0.0"
