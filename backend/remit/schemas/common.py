"""Common schema pieces — camelCase wire format and UTC timestamps.

Invariants:
    - Every response field serializes camelCase; requests accept camelCase or snake_case
    - Datetimes are always emitted with a UTC offset, even when the store returned naive values
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from remit.core.clock import ensure_utc

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AssetSummary(CamelModel):
    code: str
    name: str
    decimals: int
