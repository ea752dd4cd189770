"""Portstatus package.

This package reports which local TCP/UDP ports are in use (active
connections or listening sockets) and which are free within a port range,
as plain text or JSON.

Only the local connection tables are read. No network actions are performed.
"""

__all__ = [
    "__version__",
    "models",
]

__version__ = "0.1.0"
