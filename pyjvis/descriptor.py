"""
JVM field and method descriptor parser.

Parses descriptors such as ``(I[Ljava/lang/String;)V`` into structured types.
See JVM Spec 4.3 for the descriptor grammar.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput

from .errors import MalformedDescriptor


GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

_PRIMITIVE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void"
}


@dataclass(frozen=True)
class PrimitiveType:
    """Primitive type (B, C, D, F, I, J, S, Z) or void (V)."""
    code: str

    @property
    def descriptor(self) -> str:
        return self.code

    @property
    def name(self) -> str:
        return _PRIMITIVE_NAMES[self.code]

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ObjectType:
    """Reference to a class by internal name, e.g. java/lang/String."""
    class_name: str

    @property
    def descriptor(self) -> str:
        return f"L{self.class_name};"

    def __str__(self) -> str:
        return self.class_name.replace("/", ".")


@dataclass(frozen=True)
class ArrayType:
    element: "Type"

    @property
    def descriptor(self) -> str:
        return "[" + self.element.descriptor

    @property
    def dimensions(self) -> int:
        if isinstance(self.element, ArrayType):
            return self.element.dimensions + 1
        return 1

    def __str__(self) -> str:
        return f"{self.element}[]"


Type = Union[PrimitiveType, ObjectType, ArrayType]

VOID = PrimitiveType("V")


@dataclass(frozen=True)
class MethodDescriptor:
    arguments: tuple[Type, ...]
    return_type: Type

    @property
    def descriptor(self) -> str:
        args = "".join(arg.descriptor for arg in self.arguments)
        return f"({args}){self.return_type.descriptor}"

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.return_type} ({args})"


class DescriptorTransformer(Transformer):
    """Transforms the Lark parse tree into descriptor types."""

    def method_descriptor(self, items):
        *arguments, return_type = items
        return MethodDescriptor(arguments=tuple(arguments), return_type=return_type)

    def field_descriptor(self, items):
        return items[0]

    def void_type(self, items):
        return VOID

    def base_type(self, items):
        return PrimitiveType(str(items[0]))

    def object_type(self, items):
        return ObjectType(str(items[0])[1:-1])

    def array_type(self, items):
        return ArrayType(items[0])


class DescriptorParser:
    """Parses field and method descriptors."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="lalr",
            start=["method_descriptor", "field_descriptor"],
        )
        self._transformer = DescriptorTransformer()

    def _parse(self, text: str, start: str):
        try:
            tree = self._parser.parse(text, start=start)
        except UnexpectedInput as e:
            raise MalformedDescriptor(
                f"Malformed descriptor {text!r} at column {getattr(e, 'column', '?')}") from e
        return self._transformer.transform(tree)

    def parse_method(self, text: str) -> MethodDescriptor:
        """Parse a method descriptor, e.g. (I[Ljava/lang/String;)V."""
        return self._parse(text, "method_descriptor")

    def parse_field(self, text: str) -> Type:
        """Parse a single field type descriptor, e.g. [J."""
        return self._parse(text, "field_descriptor")
