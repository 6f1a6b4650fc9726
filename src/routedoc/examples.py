"""Example Value Generator.

One ExampleGenerator is created per generation run and shared by every
strategy, so all fake data comes from a single seeded Faker stream. With
the same seed and the same sequence of calls the values are identical
from run to run. Changing the strategy order changes the call sequence,
and therefore the values.
"""

import datetime
import enum
import math
import types
import typing
import uuid

from faker import Faker
from pydantic import BaseModel

from routedoc.models import Parameter

DEFAULT_INT_RANGE = (1, 20)
DECIMAL_STEP = 0.01

# substring of a parameter name -> Faker provider
NAME_HINTS = [
    ("email", "email"),
    ("first_name", "first_name"),
    ("last_name", "last_name"),
    ("username", "user_name"),
    ("name", "name"),
    ("url", "url"),
    ("link", "url"),
    ("uuid", "uuid4"),
    ("phone", "phone_number"),
    ("password", "password"),
    ("address", "address"),
    ("city", "city"),
    ("country", "country"),
    ("description", "sentence"),
    ("text", "sentence"),
    ("title", "sentence"),
]

# subclasses first: bool < int, datetime < date
PYTHON_TYPES = {
    bool: "boolean",
    str: "string",
    int: "integer",
    float: "number",
    list: "array",
    tuple: "array",
    set: "array",
    dict: "object",
    datetime.datetime: "datetime",
    datetime.date: "date",
    uuid.UUID: "uuid",
}


class ExampleGenerator:
    """Seeded source of example values."""

    def __init__(self, seed: int | None = None, randomize_choices: bool = False):
        self.seed = seed
        self.randomize_choices = randomize_choices
        self.faker = Faker()
        if seed is not None:
            self.faker.seed_instance(seed)

    def generate(self, param: Parameter):
        """Example value for a parameter that did not declare one."""
        if param.enum:
            return self.choose(param.enum)
        return self.for_type(
            param.type,
            param.name,
            minimum=param.minimum,
            maximum=param.maximum,
            exclusive_minimum=param.exclusive_minimum,
            exclusive_maximum=param.exclusive_maximum,
        )

    def choose(self, choices: list):
        if self.randomize_choices:
            return self.faker.random_element(choices)
        return choices[0]

    def for_type(self, param_type: str, name: str = "", **bounds):
        """Example value for a normalized type name.

        `bounds` takes minimum, maximum, exclusive_minimum and exclusive_maximum;
        numeric examples stay inside them.
        """
        param_type = (param_type or "string").lower()
        if param_type.endswith("[]"):
            return [self.for_type(param_type[:-2], name, **bounds)]
        if param_type == "integer":
            low, high = _int_bounds(**bounds)
            return self.faker.random_int(low, high)
        if param_type == "number":
            low, high = _number_bounds(**bounds)
            return float(min(max(round(self.faker.random.uniform(low, high), 2), low), high))
        if param_type == "boolean":
            return self.faker.boolean()
        if param_type == "array":
            return [self.for_type("string", name)]
        if param_type == "object":
            return {}
        if param_type == "file":
            return self.faker.file_name()
        if param_type == "date":
            return self.faker.date()
        if param_type == "datetime":
            return self.faker.iso8601()
        if param_type == "uuid":
            return self.faker.uuid4()
        return self._string(name)

    def _string(self, name: str) -> str:
        lowered = name.lower().rsplit(".", 1)[-1]
        for hint, provider in NAME_HINTS:
            if hint in lowered:
                return str(getattr(self.faker, provider)())
        if lowered.endswith("_at") or lowered.endswith("date"):
            return self.faker.date()
        return self.faker.word()

    def example_for_model(self, model: type[BaseModel]) -> dict:
        """Example object for a pydantic model, field by field in declaration order."""
        example = {}
        for name, info in model.model_fields.items():
            key = info.alias or name
            if info.examples:
                example[key] = info.examples[0]
                continue
            example[key] = self.for_annotation(info.annotation, name, **field_bounds(info.metadata))
        return example

    def for_annotation(self, annotation, name: str = "", **bounds):
        annotation = unwrap_optional(annotation)
        origin = typing.get_origin(annotation)
        if origin in (list, tuple, set):
            args = typing.get_args(annotation)
            return [self.for_annotation(args[0], name, **bounds)] if args else [self.for_type("string", name)]
        if origin is dict:
            return {}
        if origin is typing.Literal:
            return self.choose(list(typing.get_args(annotation)))
        if isinstance(annotation, type):
            if issubclass(annotation, BaseModel):
                return self.example_for_model(annotation)
            if issubclass(annotation, enum.Enum):
                return self.choose([member.value for member in annotation])
        return self.for_type(annotation_type(annotation), name, **bounds)


def unwrap_optional(annotation):
    """Optional[X] / X | None -> X."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def annotation_type(annotation) -> str:
    """Canonical type name for a Python annotation."""
    annotation = unwrap_optional(annotation)
    origin = typing.get_origin(annotation) or annotation
    if isinstance(origin, type):
        if issubclass(origin, BaseModel):
            return "object"
        for python_type, name in PYTHON_TYPES.items():
            if issubclass(origin, python_type):
                return name
    return "string"


def field_bounds(metadata: list) -> dict:
    """Numeric bounds declared on a pydantic field (ge, gt, le, lt)."""
    bounds = {}
    for constraint in metadata:
        for attr, key, exclusive in (
            ("ge", "minimum", False),
            ("gt", "minimum", True),
            ("le", "maximum", False),
            ("lt", "maximum", True),
        ):
            value = getattr(constraint, attr, None)
            if value is not None:
                bounds[key] = value
                bounds[f"exclusive_{key}"] = exclusive
    return bounds


def _int_bounds(minimum=None, maximum=None, exclusive_minimum=False, exclusive_maximum=False):
    low, high = DEFAULT_INT_RANGE
    if minimum is not None:
        low = math.floor(minimum) + 1 if exclusive_minimum else math.ceil(minimum)
    if maximum is not None:
        high = math.ceil(maximum) - 1 if exclusive_maximum else math.floor(maximum)
    if minimum is None and high < low:
        low = high
    return low, max(low, high)


def _number_bounds(minimum=None, maximum=None, exclusive_minimum=False, exclusive_maximum=False):
    low = DEFAULT_INT_RANGE[0] if minimum is None else minimum
    high = DEFAULT_INT_RANGE[1] if maximum is None else maximum
    if minimum is None and high < low:
        low = high - DEFAULT_INT_RANGE[1]
    if maximum is None and high < low:
        high = low + DEFAULT_INT_RANGE[1]
    # stay strictly inside exclusive bounds, even on narrow ranges
    step = min(DECIMAL_STEP, (high - low) / 3) if high > low else 0
    if exclusive_minimum:
        low += step
    if exclusive_maximum:
        high -= step
    return low, max(low, high)
