"""
Service layer - Business logic between the API routes and the database.

Services are reached through the ServiceContainer:

    from lumin.services.container import get_container
    container = get_container()
    result = await container.entry_service.create_entry(user_id, data)
"""

from lumin.services.container import ServiceContainer, get_container, init_container

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
]
