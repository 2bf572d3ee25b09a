"""Service layer mapping Appserver endpoints onto typed view models."""

from appserver_mcp.services.angles import AngleService
from appserver_mcp.services.appserver import AppserverService

__all__ = ["AngleService", "AppserverService"]
