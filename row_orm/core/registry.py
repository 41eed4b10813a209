"""Model registry - resolves related model names to classes.

Models register themselves when their class is created. Relations may name
their target by class name (``"Post"``) or dotted path (``"blog.models.Post"``);
both resolve by the last segment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from row_orm.core.exceptions import DuplicateModelError, UnresolvableModelError

if TYPE_CHECKING:
    from row_orm.mapping.record import Model


def basename(name: str) -> str:
    """Return the class basename of a possibly dotted model name."""
    return name.rsplit(".", 1)[-1]


class ModelRegistry:
    """Name -> model class table.

    Registration happens at import time; afterwards the registry is only
    read. Registering a *different* class under an existing name raises
    :class:`DuplicateModelError`; re-registering the same class is a no-op.

    Args:
        name: Label used in ``repr`` and log output.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._models: dict[str, type[Model]] = {}

    def register(self, model: type[Model]) -> None:
        """Register *model* under its class name."""
        existing = self._models.get(model.__name__)
        if existing is not None and existing is not model:
            raise DuplicateModelError(model.__name__)
        self._models[model.__name__] = model

    def get(self, name: str) -> type[Model]:
        """Look up a model class by (possibly dotted) class name.

        Raises:
            UnresolvableModelError: If no model is registered under the name.
        """
        try:
            return self._models[basename(name)]
        except KeyError:
            raise UnresolvableModelError(name) from None

    def has(self, name: str) -> bool:
        """Check if a model name is registered."""
        return basename(name) in self._models

    @property
    def model_names(self) -> list[str]:
        """List all registered model names, sorted alphabetically."""
        return sorted(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"<ModelRegistry {self.name!r} models={self.model_names}>"


default_registry = ModelRegistry()
