from types import SimpleNamespace
from typing import Any, Dict, Optional
from marshmallow import INCLUDE, Schema, post_dump, post_load

JSON = Dict[str, Any]
MAX_REPR_LEN = 80


class BaseModel(SimpleNamespace):
    """BaseModel that all typed resource models inherit from.

    Args:
        **kwargs: All passed parameters as converted to instance attributes.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.__dict__.update(kwargs)

    def __repr__(self) -> str:
        """Return a default repr of any Model, truncated to `MAX_REPR_LEN`."""
        repr_ = super().__repr__()
        if len(repr_) > MAX_REPR_LEN:
            return repr_[:MAX_REPR_LEN] + " ...)"
        else:
            return repr_

    def as_dict(self) -> Dict[str, Any]:
        result = {}
        for key, value in self.__dict__.items():
            if isinstance(value, BaseModel):
                result[key] = value.as_dict()
            elif isinstance(value, list):
                result[key] = [
                    item.as_dict() if isinstance(item, BaseModel) else item
                    for item in value
                ]
            else:
                result[key] = value
        return result


class UnknownModel(BaseModel):
    """A convenience class that inherits from `BaseModel`."""

    def keys(self):
        return self.__dict__.keys()

    def values(self):
        return self.__dict__.values()

    def items(self):
        return self.__dict__.items()


class BaseSchema(Schema):
    """The default schema for all models."""

    __model__: Any = UnknownModel
    """Determine the object that is created when the load method is called."""

    class Meta:
        unknown = INCLUDE
        ordered = True

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> "__model__":
        """Build model for the given `__model__` class attribute."""
        return self.__model__(**data)

    @post_dump(pass_original=True)
    def remove_empty(self, data: JSON, original: Any, **kwargs: Any) -> Optional[JSON]:
        """Write back undeclared fields, then drop unset ones.

        Fields the schema does not declare are kept on load (``INCLUDE``),
        so they are dumped unchanged too. Unset fields are not sent to the
        API server as nulls.
        """
        if isinstance(original, BaseModel):
            declared = {field.attribute or name for name, field in self.fields.items()}
            for key, value in vars(original).items():
                if key not in declared and key not in data:
                    data[key] = value
        return {k: v for k, v in data.items() if v is not None}
