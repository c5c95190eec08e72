"""Service layer: the action handlers behind the backend's dispatch table.

Services may import from domain and infrastructure layers.
They must never import from server, client, or commands.
"""
