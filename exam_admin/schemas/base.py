from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body in wire (camelCase) shape; unknown keys are dropped."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def wire(self) -> dict:
        # only the keys the client actually sent, so PATCH can tell absent from null
        return self.model_dump(by_alias=True, exclude_unset=True)
