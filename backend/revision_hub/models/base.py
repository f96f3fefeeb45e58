"""
Strict Base Models for API Request/Response Validation

Base classes with strict validation settings that harden the API contract
between the backend and the web client.

The client speaks camelCase JSON (`itemRef`, `easeFactor`); Python code uses
snake_case attributes. The alias generator bridges the two: requests are
accepted in camelCase (or snake_case, for internal callers and tests) and
responses are serialized in camelCase.

Usage:
    # For request bodies (strictest validation)
    class ReviewSubmitRequest(StrictRequest):
        item_ref: str
        rating: int

    # For response bodies (allows extra attributes from ORM rows)
    class ScheduleStateModel(StrictResponse):
        repetitions: int
        ease_factor: float

Architecture:
    API Request → StrictRequest (extra="forbid") → Route Handler
    Service result → StrictResponse (extra="ignore") → API Response
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictRequest(BaseModel):
    """
    Base model for API request bodies with strict validation.

    Rejects any fields not explicitly declared in the model, catching
    client typos at request time rather than at runtime.

    Features:
        - extra="forbid": Unknown fields are rejected (400 validation_error)
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
        - alias_generator=to_camel: Accepts camelCase keys
        - populate_by_name=True: Also accepts snake_case field names

    Example:
        >>> class UndoRequest(StrictRequest):
        ...     item_ref: str
        >>>
        >>> UndoRequest(itemRef="q-1")  # OK
        >>> UndoRequest(item_reff="q-1")  # Raises ValidationError
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StrictResponse(BaseModel):
    """
    Base model for API response bodies.

    More lenient than StrictRequest to allow building responses straight
    from ORM rows and service dataclasses.

    Features:
        - extra="ignore": Silently ignores extra attributes
        - from_attributes=True: Allows ORM/dataclass conversion
        - alias_generator=to_camel: Serializes as camelCase (FastAPI
          renders response models by alias)
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_default=True,
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
