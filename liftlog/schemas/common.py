from datetime import datetime
from typing import Annotated
from pydantic import AfterValidator, Field, StringConstraints

from liftlog.timeutil import as_utc

# Stored timestamps are UTC; SQLite drops the offset, so put it back on the way out
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
NonNegInt = Annotated[int, Field(ge=0)]
PosInt = Annotated[int, Field(ge=1)]
Weight = Annotated[float, Field(ge=0, le=9999.99)]
Rpe = Annotated[int, Field(ge=1, le=10)]
