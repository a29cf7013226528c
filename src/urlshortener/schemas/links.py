from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(_CamelModel):
    # validated by the service so the stored string stays byte-for-byte
    original_url: Optional[str] = None


class ShortenResponse(_CamelModel):
    short_url: str
    short_code: str


class UrlMappingResponse(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    original_url: str
    short_code: str
    visit_count: int
    created_at: datetime
    updated_at: datetime
