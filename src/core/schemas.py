from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


class BaseDTO(BaseModel):
    class Config:
        from_attributes = True


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
MoneyDecimal = Annotated[Decimal, Field(ge=0, allow_inf_nan=False)]
