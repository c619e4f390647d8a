"""
Java class file reader.

Reads the class file layout in order (magic, version, constant pool, class
references, interfaces, fields, methods, attributes) and decodes the Code
attribute of every method. Field contents and most attributes are skipped by
their declared sizes.
"""

import logging
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import Optional

from .bytecode import Instruction, decode
from .constpool import ConstantPool, read_constant_pool
from .cursor import ByteCursor
from .errors import ClassFormatError, NotAClassFile

logger = logging.getLogger(__name__)


class MethodAccessFlags(IntFlag):
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SYNCHRONIZED = 0x0020
    BRIDGE = 0x0040
    VARARGS = 0x0080
    NATIVE = 0x0100
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000


def access_flag_names(flags: int) -> list[str]:
    """Lower-case names of the method access flags set in ``flags``."""
    return [flag.name.lower() for flag in MethodAccessFlags if flags & flag]


@dataclass(frozen=True)
class CodeAttribute:
    """Code attribute for a method."""
    max_stack: int
    max_locals: int
    code: bytes
    instructions: tuple[Instruction, ...]


@dataclass(frozen=True)
class MethodInfo:
    """Parsed method information."""
    access_flags: int
    name: str
    descriptor: str
    code: Optional[CodeAttribute] = None

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return self.code.instructions if self.code else ()


@dataclass(frozen=True)
class ClassInfo:
    """Parsed class file information."""
    version: tuple[int, int]
    access_flags: int
    name: str
    super_class: Optional[str]
    interfaces: tuple[str, ...]
    methods: tuple[MethodInfo, ...]
    constant_pool: ConstantPool
    source_file: Optional[str] = None


class ClassReader:
    """Reads Java class files."""

    MAGIC = 0xCAFEBABE

    def __init__(self, data: bytes):
        self.cursor = ByteCursor(data)
        self.constant_pool: Optional[ConstantPool] = None

    def _read_attributes(self) -> dict[str, bytes]:
        """Read an attribute table; return raw bodies keyed by name."""
        count = self.cursor.read_u2()
        attrs = {}
        for _ in range(count):
            name = self.constant_pool.utf8(self.cursor.read_u2())
            length = self.cursor.read_u4()
            attrs[name] = self.cursor.read_bytes(length)
        return attrs

    def _read_code(self, body: bytes, method_name: str) -> CodeAttribute:
        cursor = ByteCursor(body)
        max_stack = cursor.read_u2()
        max_locals = cursor.read_u2()
        code = cursor.read_bytes(cursor.read_u4())
        # Exception table: start_pc, end_pc, handler_pc, catch_type
        cursor.skip(8 * cursor.read_u2())
        for _ in range(cursor.read_u2()):
            cursor.skip(2)
            cursor.skip(cursor.read_u4())
        if cursor.remaining:
            raise ClassFormatError(
                f"Code attribute of {method_name} has {cursor.remaining} trailing byte(s)")

        instructions = decode(code, self.constant_pool)
        logger.debug("method %s: %d bytes, %d instructions",
                     method_name, len(code), len(instructions))
        return CodeAttribute(max_stack, max_locals, code, instructions)

    def _skip_field(self):
        # access_flags, name_index, descriptor_index
        self.cursor.skip(6)
        self._read_attributes()

    def _read_method(self) -> MethodInfo:
        """Read a method."""
        access = self.cursor.read_u2()
        name = self.constant_pool.utf8(self.cursor.read_u2())
        descriptor = self.constant_pool.utf8(self.cursor.read_u2())
        attrs = self._read_attributes()

        code = None
        if "Code" in attrs:
            code = self._read_code(attrs["Code"], name)

        return MethodInfo(
            access_flags=access,
            name=name,
            descriptor=descriptor,
            code=code,
        )

    def read(self) -> ClassInfo:
        """Read the class file and return ClassInfo."""
        try:
            magic = self.cursor.read_u4()
        except ClassFormatError as e:
            raise NotAClassFile("Input is too short to be a class file") from e
        if magic != self.MAGIC:
            raise NotAClassFile(f"Invalid class file magic: {hex(magic)}")

        minor = self.cursor.read_u2()
        major = self.cursor.read_u2()

        self.constant_pool = read_constant_pool(self.cursor, self.cursor.read_u2())
        logger.debug("class file %d.%d, constant pool count %d",
                     major, minor, len(self.constant_pool))

        access_flags = self.cursor.read_u2()

        this_class = self.constant_pool.class_name(self.cursor.read_u2())
        super_class_idx = self.cursor.read_u2()
        super_class = self.constant_pool.class_name(super_class_idx) if super_class_idx else None

        interfaces_count = self.cursor.read_u2()
        interfaces = tuple(
            self.constant_pool.class_name(self.cursor.read_u2())
            for _ in range(interfaces_count)
        )

        for _ in range(self.cursor.read_u2()):
            self._skip_field()

        methods_count = self.cursor.read_u2()
        methods = tuple(self._read_method() for _ in range(methods_count))

        attrs = self._read_attributes()
        source_file = None
        if "SourceFile" in attrs:
            source_file = self.constant_pool.utf8(ByteCursor(attrs["SourceFile"]).read_u2())

        if self.cursor.remaining:
            raise ClassFormatError(
                f"{this_class} has {self.cursor.remaining} trailing byte(s) after its attributes")

        logger.debug("read %s: %d method(s)", this_class, len(methods))

        return ClassInfo(
            version=(major, minor),
            access_flags=access_flags,
            name=this_class,
            super_class=super_class,
            interfaces=interfaces,
            methods=methods,
            constant_pool=self.constant_pool,
            source_file=source_file,
        )


def read_class_file(path: str | Path) -> ClassInfo:
    """Read a single class file."""
    data = Path(path).read_bytes()
    reader = ClassReader(data)
    return reader.read()
