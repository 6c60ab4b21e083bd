# app/api/deps/forms.py
from typing import Type, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_form(model: Type[ModelT], **values) -> ModelT:
    """
    Validate multipart form fields with a pydantic schema.

    Failures surface as the usual 422 response instead of a 500.
    """
    try:
        return model(**values)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))
