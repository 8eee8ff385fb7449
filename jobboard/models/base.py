# jobboard/models/base.py
"""
Store-boundary parsing.

Documents come back from Mongo with an ``_id`` (ObjectId or plain string),
camelCase field names and whatever optional fields the writer happened to set,
sometimes as explicit nulls. ``DocumentModel.from_doc`` turns that into a
validated model; optional fields are defaulted here and nowhere else.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", use_enum_values=True)


class DocumentModel(CamelModel):
    id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # a stored null means "not set": let the field default apply
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @classmethod
    def from_doc(cls, doc: Optional[Dict[str, Any]]):
        if not doc:
            return None
        data = dict(doc)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump(mode="python", by_alias=True, exclude={"id"}, exclude_none=True)
