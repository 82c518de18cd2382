"""Field-centric domain models."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

FULL_WIDTH = 12
HALF_WIDTH = 6


class SelectOption(BaseModel):
    """Single choice offered by a select-like field."""

    model_config = ConfigDict(extra="forbid")

    id: str
    value: str
    label: str
    price: int | float = Field(default=0, ge=0)


class TextAttributes(BaseModel):
    """Length bounds for free-text kinds."""

    model_config = ConfigDict(extra="forbid")

    variant: Literal["text"] = "text"
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> TextAttributes:
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValueError("min_length must not exceed max_length")
        return self


class NumberAttributes(BaseModel):
    """Numeric bounds for number kinds."""

    model_config = ConfigDict(extra="forbid")

    variant: Literal["number"] = "number"
    min_value: int | float | None = None
    max_value: int | float | None = None
    allow_decimal: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> NumberAttributes:
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError("min_value must not exceed max_value")
        return self


class ChoiceAttributes(BaseModel):
    """Ordered options for select kinds."""

    model_config = ConfigDict(extra="forbid")

    variant: Literal["choice"] = "choice"
    options: list[SelectOption] = Field(default_factory=list)


FieldAttributes = Annotated[
    TextAttributes | NumberAttributes | ChoiceAttributes,
    Field(discriminator="variant"),
]


class FieldTypeDescriptor(BaseModel):
    """Static catalog entry describing one field kind."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: str
    label: str
    icon: str
    default_attributes: FieldAttributes


class FormField(BaseModel):
    """A field instance placed on a form.

    The envelope carries the attributes every kind shares; `attributes`
    carries the kind-specific payload copied from the descriptor defaults.
    `columns` is derived from the occupancy of the owning row and is
    maintained by the layout engine.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str
    kind: str
    page_id: str = ""
    label: str = ""
    description: str = ""
    placeholder: str = ""
    required: bool = False
    disabled_after_submission: bool = False
    columns: Literal[6, 12] = FULL_WIDTH
    attributes: FieldAttributes
