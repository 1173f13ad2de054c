"""Base schema classes.

Row dicts stay snake_case inside the backend; API JSON is camelCase.
"""
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts either spelling, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "protected_namespaces": (),
    }


class RecordModel(CamelModel):
    """Response body for a stored record row, from either record store adapter."""
    model_config = {**CamelModel.model_config, "from_attributes": True}

    id: str
    user_id: str

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        # SQL rows carry UUID objects when read straight off the model
        return v if isinstance(v, str) else str(v)
