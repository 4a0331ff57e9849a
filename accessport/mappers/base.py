"""
Generic mapper between entities and transfer objects.

Mappers are pure: no I/O, no sessions, no repository access. The only
failure they report is malformed input, as ``ValidationException``.
"""

import dataclasses
from typing import (
    Any,
    ClassVar,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..domain.entities import Entity
from ..domain.exceptions import ValidationException

E = TypeVar("E", bound=Entity)
D = TypeVar("D", bound=BaseModel)


def _to_validation_exception(exc: PydanticValidationError) -> ValidationException:
    """Convert the first pydantic error into a ValidationException."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "data"
    return ValidationException(field, error.get("input"), error["msg"])


class Mapper(Generic[E, D]):
    """
    Translate between one entity type and one transfer object type.

    Subclasses set ``entity_type`` and ``dto_type``, and optionally
    ``patch_type`` for partial updates. The transfer contract is the set
    of fields declared on ``dto_type``.
    """

    entity_type: ClassVar[Type[Entity]]
    dto_type: ClassVar[Type[BaseModel]]
    patch_type: ClassVar[Optional[Type[BaseModel]]] = None

    def __init__(self):
        for name in ("entity_type", "dto_type"):
            if getattr(self, name, None) is None:
                raise TypeError(f"{type(self).__name__} must define {name}")

        unknown = set(self.transfer_fields) - set(self.entity_type.field_names())
        if unknown:
            raise TypeError(
                f"{self.dto_type.__name__} declares fields missing from "
                f"{self.entity_type.__name__}: {', '.join(sorted(unknown))}"
            )

    @property
    def transfer_fields(self) -> List[str]:
        return list(self.dto_type.model_fields)

    def to_transfer_object(self, entity: E) -> D:
        """
        Build the transfer object for an entity.

        Values come from an entity that was validated when it was built,
        so they are copied without re-validation.
        """
        values = {name: getattr(entity, name) for name in self.transfer_fields}
        return self.dto_type.model_construct(**values)

    def to_transfer_objects(self, entities: Iterable[E]) -> List[D]:
        return [self.to_transfer_object(entity) for entity in entities]

    def to_entity(self, data: Union[D, Mapping[str, Any]], existing: Optional[E] = None) -> E:
        """
        Build an entity from transfer data.

        Args:
            data: Transfer object, or a mapping validated into one
            existing: Entity to merge into; its identity and store-managed
                fields are kept

        Returns:
            New entity without identity, or a merged copy of ``existing``

        Raises:
            ValidationException: If data is malformed or a required field is missing
        """
        dto = self._coerce(data, self.dto_type)
        values = dto.model_dump()

        if existing is None:
            return self.entity_type(**values)

        if not isinstance(existing, self.entity_type):
            raise ValidationException(
                "existing",
                type(existing).__name__,
                f"expected {self.entity_type.__name__}",
            )
        return dataclasses.replace(existing, **values)

    def to_update_fields(self, patch: Union[BaseModel, Mapping[str, Any]]) -> dict:
        """
        Extract the fields a caller explicitly set on a patch.

        Returns:
            Mapping suitable for ``Repository.update``
        """
        patch_type = self.patch_type or self.dto_type
        dto = self._coerce(patch, patch_type)
        return dto.model_dump(exclude_unset=True)

    @staticmethod
    def _coerce(data: Any, model: Type[BaseModel]) -> BaseModel:
        if isinstance(data, model):
            return data
        if isinstance(data, Mapping):
            try:
                return model.model_validate(dict(data))
            except PydanticValidationError as e:
                raise _to_validation_exception(e) from e
        raise ValidationException(
            "data", type(data).__name__, f"expected {model.__name__} or a mapping"
        )
