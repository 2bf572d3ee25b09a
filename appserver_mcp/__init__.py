"""
Application package for the Appserver MCP gateway.

Submodules cover configuration, HTTP clients, the Appserver and Angle
services, MCP tool registrations and the HTTP health controllers.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
