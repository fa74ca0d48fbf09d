from dataclasses import dataclass
from flask import current_app
from community_booking.exceptions import NotFound

RESOURCE_TYPES = ('hall', 'outdoor', 'meeting_room')


@dataclass(frozen=True)
class Resource:
    id: str
    name: str
    type: str
    capacity: int

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'capacity': self.capacity,
        }


class ResourceCatalog:
    """Fixed list of bookable resources, known at startup."""

    def __init__(self, resources):
        self._resources = tuple(resources)
        self._by_id = {}
        for resource in self._resources:
            if resource.id in self._by_id:
                raise ValueError(f"Duplicate resource id in catalog: {resource.id!r}")
            self._by_id[resource.id] = resource

    @classmethod
    def from_config(cls, entries):
        resources = []
        for entry in entries:
            resource_id = str(entry.get('id') or '').strip()
            name = str(entry.get('name') or '').strip()
            resource_type = entry.get('type')
            capacity = entry.get('capacity')

            if not resource_id or not name:
                raise ValueError(f"Resource entries need an id and a name: {entry!r}")
            if resource_type not in RESOURCE_TYPES:
                raise ValueError(f"Unknown resource type {resource_type!r} for {resource_id!r}")
            if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
                raise ValueError(f"Capacity must be a positive integer for {resource_id!r}, got {capacity!r}")

            resources.append(Resource(id=resource_id, name=name, type=resource_type, capacity=capacity))
        return cls(resources)

    def list_resources(self):
        return list(self._resources)

    def find(self, resource_id):
        return self._by_id.get(resource_id) if isinstance(resource_id, str) else None

    def get_resource(self, resource_id):
        resource = self._by_id.get(resource_id) if isinstance(resource_id, str) else None
        if resource is None:
            raise NotFound(f"Resource {resource_id!r} not found.")
        return resource

    def __len__(self):
        return len(self._resources)


def get_catalog():
    """Catalog bound to the current Flask app."""
    return current_app.extensions['resource_catalog']
