"""
Chart format base class.

Every format wraps one parsed document and knows how to turn it into an
authoring Chart and back. Conversion between two formats always goes
through a Chart:

    source document → ChartFormat.to_chart() → Chart
    Chart → OtherFormat.from_chart() → target document
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, Field, ValidationError

from chuk_mcp_phichain.compiler.pipeline import compile_chart
from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.errors import ChartFormatError
from chuk_mcp_phichain.models.chart import Chart, PrimitiveChart

ModelT = TypeVar("ModelT", bound=BaseModel)


class CommonOutputOptions(BaseModel):
    """Options applied to every exported document."""

    round: int = Field(2, ge=0, le=12, description="Decimal places kept for positions and speeds")

    model_config = {"frozen": True}

    def round_value(self, value: float) -> float:
        return round(value, self.round)


def validate_document(model: type[ModelT], data: Any) -> ModelT:
    """
    Validate an external document against its schema model.

    Raises:
        ChartFormatError: With the location of the first failing field
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(part) for part in first["loc"]) or None
        raise ChartFormatError(first["msg"], path) from e


class ChartFormat(ABC):
    """
    A chart document in one format.

    Subclasses set `name` and the option models they accept, and implement
    parsing, dumping and the conversion to and from an authoring Chart.
    """

    name: ClassVar[FormatName]
    description: ClassVar[str] = ""
    input_options: ClassVar[type[BaseModel] | None] = None
    output_options: ClassVar[type[BaseModel] | None] = None

    def __init__(self, document: Any):
        self.document = document

    @classmethod
    @abstractmethod
    def parse(cls, data: Any) -> ChartFormat:
        """Build from decoded JSON."""

    @abstractmethod
    def dump(self) -> Any:
        """Return JSON-ready data."""

    @abstractmethod
    def to_chart(self, options: BaseModel | None = None) -> Chart:
        """Convert to an authoring chart."""

    @classmethod
    @abstractmethod
    def from_chart(cls, chart: Chart, options: BaseModel | None = None) -> ChartFormat:
        """Convert from an authoring chart."""

    def into_primitive(self) -> PrimitiveChart:
        """Compile this document into a primitive chart."""
        return compile_chart(self.to_chart())

    @classmethod
    def from_primitive(cls, primitive: PrimitiveChart) -> ChartFormat:
        return cls.from_chart(primitive.into_chart())

    def apply_common_output_options(self, options: CommonOutputOptions) -> ChartFormat:
        """Post-process an exported document. Most formats keep full precision."""
        return self

    def copy(self) -> ChartFormat:
        return type(self)(copy.deepcopy(self.document))

    @classmethod
    def _options(cls, model: type[ModelT], options: BaseModel | None) -> ModelT:
        if options is None:
            return model()
        if not isinstance(options, model):
            raise TypeError(f"{cls.__name__} expects {model.__name__}, got {type(options).__name__}")
        return options
