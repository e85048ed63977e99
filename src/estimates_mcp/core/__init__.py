"""Core logic: query building, the upstream client, and result models.

This module has no dependency on MCP or any server framework.
"""
