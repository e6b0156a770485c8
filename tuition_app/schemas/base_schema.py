from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

class CamelModel(BaseModel):
    """
    Base for every request and response body.
    Fields are snake_case in Python and camelCase on the wire, and bodies are accepted in either form.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class DocumentResponse(CamelModel):
    """Stored record. The id is serialized as `_id` like the rest of the API expects."""
    id: str = Field(serialization_alias="_id")

############################
#### STORE ACK SCHEMAS #####
############################

class InsertResult(CamelModel):
    """Acknowledgement for an insert. `inserted_id` is None when nothing was written."""
    acknowledged: bool = True
    inserted_id: Optional[str]
    message: Optional[str] = None

class UpdateResult(CamelModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None
    message: Optional[str] = None

class DeleteResult(CamelModel):
    acknowledged: bool = True
    deleted_count: int
    message: Optional[str] = None
