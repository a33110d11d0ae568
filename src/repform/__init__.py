"""Fixed-width report layout engine with an inverse reader."""

from repform.errors import ArityMismatchError, ConfigError, FormatError, MalformedFieldError
from repform.form import Band, Form
from repform.reader import Matcher, build_matcher, read
from repform.renderer import Renderer
from repform.resolver import AttributeResolver, MappingResolver
from repform.sinks import ListSink, StreamSink

__all__ = [
    "ArityMismatchError",
    "AttributeResolver",
    "Band",
    "ConfigError",
    "Form",
    "FormatError",
    "ListSink",
    "MalformedFieldError",
    "MappingResolver",
    "Matcher",
    "Renderer",
    "StreamSink",
    "build_matcher",
    "read",
]
