from decimal import Decimal
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from orderdesk.util.money import money_str

class CamelModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case accepted on input too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class ErrorOut(BaseModel):
    detail: str | list
    error_code: str
    path: str

def as_money(v):
    if isinstance(v, (Decimal, int, float)):
        return money_str(v)
    return v
