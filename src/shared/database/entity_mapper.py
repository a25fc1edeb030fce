from typing import Any, Callable


class EntityMapper:
    """Dispatches domain models to the mapper registered for their type."""

    def __init__(self, entity_mappings: dict[type, Callable[[Any], Any]]):
        self.entity_mappings = dict(entity_mappings)

    def map_to_entity(self, model_instance: Any):
        to_entity = self.entity_mappings.get(type(model_instance))
        if to_entity is None:
            raise ValueError(f"No entity mapping found for model type: {type(model_instance).__name__}")
        return to_entity(model_instance)
