"""
Constant pool parsing and cross-reference resolution.

Entries are stored 1-indexed exactly as laid out in the class file. Long and
Double entries take two slots; the slot after them holds a placeholder that
cannot be looked up.
"""

import math
import struct
from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum
from typing import Optional, Union

from .cursor import ByteCursor
from .errors import (
    ClassFormatError,
    InvalidConstantIndex,
    MalformedConstantReference,
    UnknownConstantTag,
)


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    DYNAMIC = 17
    INVOKE_DYNAMIC = 18
    MODULE = 19
    PACKAGE = 20


@dataclass(frozen=True)
class Utf8:
    text: str


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Long:
    value: int


@dataclass(frozen=True)
class Double:
    value: float


@dataclass(frozen=True)
class ClassRef:
    name_index: int


@dataclass(frozen=True)
class StringRef:
    utf8_index: int


@dataclass(frozen=True)
class FieldRef:
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class MethodRef:
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class InterfaceMethodRef:
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class NameAndType:
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class MethodHandle:
    reference_kind: int
    reference_index: int


@dataclass(frozen=True)
class MethodType:
    descriptor_index: int


@dataclass(frozen=True)
class Dynamic:
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class InvokeDynamic:
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class Module:
    name_index: int


@dataclass(frozen=True)
class Package:
    name_index: int


ConstantPoolEntry = Union[
    Utf8, Integer, Float, Long, Double, ClassRef, StringRef, FieldRef,
    MethodRef, InterfaceMethodRef, NameAndType, MethodHandle, MethodType,
    Dynamic, InvokeDynamic, Module, Package,
]

MemberRef = (FieldRef, MethodRef, InterfaceMethodRef)

# Placeholder for the unusable slot following a Long or Double
_WIDE_SLOT = object()


def decode_modified_utf8(data: bytes) -> str:
    """Decode the class file's modified UTF-8 (NUL as C0 80, CESU-8 surrogates)."""
    try:
        text = data.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")
    except UnicodeDecodeError as e:
        raise ClassFormatError(f"Invalid Utf8 constant: {e}") from e
    # Re-pair surrogates that were encoded as two separate 3-byte sequences
    return text.encode("utf-16", errors="surrogatepass").decode(
        "utf-16", errors="surrogatepass")


class ConstantPool:
    """An immutable, 1-indexed constant pool."""

    def __init__(self, entries: list):
        self._entries = tuple([None] + list(entries))

    def __len__(self) -> int:
        """Declared pool count (highest usable index + 1)."""
        return len(self._entries)

    def __iter__(self):
        """Yield (index, entry) for every usable slot."""
        for idx, entry in enumerate(self._entries):
            if entry is not None and entry is not _WIDE_SLOT:
                yield idx, entry

    def lookup(self, index: int) -> ConstantPoolEntry:
        if index <= 0 or index >= len(self._entries):
            raise InvalidConstantIndex(index)
        entry = self._entries[index]
        if entry is _WIDE_SLOT:
            raise InvalidConstantIndex(index, "second slot of a long or double")
        return entry

    def _expect(self, index: int, kinds, what: str):
        entry = self.lookup(index)
        if not isinstance(entry, kinds):
            raise MalformedConstantReference(
                f"Expected {what} at index {index}, got {type(entry).__name__}")
        return entry

    def utf8(self, index: int) -> str:
        """Get UTF8 string from constant pool."""
        return self._expect(index, Utf8, "Utf8").text

    def class_name(self, index: int) -> str:
        """Get the internal (slash separated) class name of a Class entry."""
        entry = self._expect(index, ClassRef, "Class")
        return self.utf8(entry.name_index)

    def name_and_type(self, index: int) -> tuple[str, str]:
        entry = self._expect(index, NameAndType, "NameAndType")
        return self.utf8(entry.name_index), self.utf8(entry.descriptor_index)

    def member(self, index: int) -> tuple[str, str, str]:
        """Resolve a field/method reference to (owner, name, descriptor)."""
        entry = self._expect(index, MemberRef, "Fieldref or Methodref")
        owner = self.class_name(entry.class_index)
        name, descriptor = self.name_and_type(entry.name_and_type_index)
        return owner, name, descriptor

    def describe(self, index: int) -> str:
        """Render an entry in human-readable form, following references."""
        entry = self.lookup(index)
        if isinstance(entry, Utf8):
            return entry.text
        if isinstance(entry, (Integer, Long)):
            return str(entry.value)
        if isinstance(entry, Float):
            return java_float_text(entry.value, single=True)
        if isinstance(entry, Double):
            return java_float_text(entry.value)
        if isinstance(entry, ClassRef):
            return java_name(self.utf8(entry.name_index))
        if isinstance(entry, StringRef):
            return self.utf8(entry.utf8_index)
        if isinstance(entry, MemberRef):
            owner, name, descriptor = self.member(index)
            return f"{java_name(owner)}.{name}:{descriptor}"
        if isinstance(entry, NameAndType):
            name, descriptor = self.name_and_type(index)
            return f"{name}:{descriptor}"
        if isinstance(entry, MethodHandle):
            self._expect(entry.reference_index, MemberRef, "Fieldref or Methodref")
            return self.describe(entry.reference_index)
        if isinstance(entry, MethodType):
            return self.utf8(entry.descriptor_index)
        if isinstance(entry, (Dynamic, InvokeDynamic)):
            name, descriptor = self.name_and_type(entry.name_and_type_index)
            return f"#{entry.bootstrap_method_attr_index}:{name}:{descriptor}"
        if isinstance(entry, (Module, Package)):
            return self.utf8(entry.name_index)
        raise MalformedConstantReference(f"Cannot describe entry at index {index}")


def _shortest_single(value: float) -> str:
    """Fewest significant digits that read back to the same 32-bit float."""
    packed = struct.pack(">f", value)
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        try:
            if struct.pack(">f", float(text)) == packed:
                return text
        except OverflowError:
            # rounded past the largest finite float
            continue
    return repr(value)


def java_float_text(value: float, single: bool = False) -> str:
    """Render a float or double literal the way Float/Double.toString does.

    Magnitudes in [1e-3, 1e7) use plain decimal notation with at least one
    fractional digit; everything else uses ``d.dddE<exp>``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "-0.0" if math.copysign(1.0, value) < 0 else "0.0"

    number = Decimal(_shortest_single(value) if single else repr(value))
    sign, digits, exponent = number.as_tuple()
    scientific = len(digits) + exponent - 1
    if -3 <= scientific < 7:
        text = format(number, "f")
        return text if "." in text else text + ".0"

    mantissa = "".join(map(str, digits)).rstrip("0") or "0"
    return f"{'-' if sign else ''}{mantissa[0]}.{mantissa[1:] or '0'}E{scientific}"


def java_name(internal_name: str) -> str:
    """java/lang/String -> java.lang.String; array descriptors are kept as is."""
    if internal_name.startswith("["):
        return internal_name
    return internal_name.replace("/", ".")


def _read_entry(cursor: ByteCursor, tag: int) -> Optional[ConstantPoolEntry]:
    if tag == ConstantPoolTag.UTF8:
        length = cursor.read_u2()
        return Utf8(decode_modified_utf8(cursor.read_bytes(length)))
    elif tag == ConstantPoolTag.INTEGER:
        return Integer(cursor.read_s4())
    elif tag == ConstantPoolTag.FLOAT:
        return Float(cursor.read_f4())
    elif tag == ConstantPoolTag.LONG:
        return Long(cursor.read_s8())
    elif tag == ConstantPoolTag.DOUBLE:
        return Double(cursor.read_f8())
    elif tag == ConstantPoolTag.CLASS:
        return ClassRef(cursor.read_u2())
    elif tag == ConstantPoolTag.STRING:
        return StringRef(cursor.read_u2())
    elif tag == ConstantPoolTag.FIELDREF:
        return FieldRef(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.METHODREF:
        return MethodRef(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.INTERFACE_METHODREF:
        return InterfaceMethodRef(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.NAME_AND_TYPE:
        return NameAndType(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.METHOD_HANDLE:
        return MethodHandle(cursor.read_u1(), cursor.read_u2())
    elif tag == ConstantPoolTag.METHOD_TYPE:
        return MethodType(cursor.read_u2())
    elif tag == ConstantPoolTag.DYNAMIC:
        return Dynamic(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.INVOKE_DYNAMIC:
        return InvokeDynamic(cursor.read_u2(), cursor.read_u2())
    elif tag == ConstantPoolTag.MODULE:
        return Module(cursor.read_u2())
    elif tag == ConstantPoolTag.PACKAGE:
        return Package(cursor.read_u2())
    return None


def read_constant_pool(cursor: ByteCursor, count: int) -> ConstantPool:
    """Read ``count - 1`` pool slots; the cursor sits right after the count field."""
    entries = []
    i = 1
    while i < count:
        offset = cursor.pos
        tag = cursor.read_u1()
        entry = _read_entry(cursor, tag)
        if entry is None:
            raise UnknownConstantTag(
                f"Unknown constant pool tag {tag} at index {i} (offset {offset})")
        entries.append(entry)
        if isinstance(entry, (Long, Double)):
            if i + 1 >= count:
                raise ClassFormatError(
                    f"Two-slot constant at index {i} overruns pool count {count}")
            entries.append(_WIDE_SLOT)
            i += 2
        else:
            i += 1
    return ConstantPool(entries)
