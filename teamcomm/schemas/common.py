from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel

from teamcomm.core.security import as_utc


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value)


# Timestamps are stored and compared in UTC; naive input is taken as UTC
UTCDateTime = Annotated[datetime, AfterValidator(_to_utc)]


class AuditFields(BaseModel):
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None


class CountResponse(BaseModel):
    count: int
