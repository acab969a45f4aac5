"""Procedure Schemas — input/output models for the demo procedures.

Invariants:
    - GreetInput.name: at least 1 character
    - DivideInput/DivideOutput accept finite numbers only (JSON has no NaN/Infinity);
      zero divisors are a business rule enforced by the handler, not the schema
    - TodoList is the output type of getTodos (ordered, id-unique)
"""

from pydantic import BaseModel, ConfigDict, Field


class MessageOutput(BaseModel):
    """Single-message response shared by hello and greet."""
    message: str


class GreetInput(BaseModel):
    name: str = Field(min_length=1)


class DivideInput(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    a: float
    b: float


class DivideOutput(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    result: float


class Todo(BaseModel):
    id: int
    text: str
    completed: bool


TodoList = list[Todo]


class CurrentTime(BaseModel):
    """Server clock reading."""
    timestamp: str = Field(description="UTC instant, ISO-8601 with milliseconds")
    timezone: str = Field(description="IANA time zone name of the server")
