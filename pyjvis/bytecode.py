"""
Streaming decoder for a method's bytecode array.

Walks the Code attribute body one instruction at a time using the layouts in
:mod:`pyjvis.opcodes`, resolving constant pool operands and turning relative
branch offsets into absolute targets.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .constpool import (
    ClassRef,
    ConstantPool,
    Double,
    Dynamic,
    FieldRef,
    Float,
    Integer,
    InterfaceMethodRef,
    InvokeDynamic,
    Long,
    MemberRef,
    MethodHandle,
    MethodRef,
    MethodType,
    StringRef,
    java_name,
)
from .cursor import ByteCursor
from .errors import (
    MalformedConstantReference,
    MalformedInstruction,
    TruncatedInstruction,
    UnexpectedEndOfInput,
    UnknownOpcode,
)
from .opcodes import LOOKUPSWITCH, OPCODES, TABLESWITCH, WIDE, WIDENABLE


@dataclass(frozen=True)
class LocalSlot:
    index: int


@dataclass(frozen=True)
class Immediate:
    value: int


@dataclass(frozen=True)
class ConstantRef:
    """A resolved constant pool operand."""
    index: int
    kind: str  # entry class name, e.g. "MethodRef"
    text: str  # human-readable form, e.g. "java.io.PrintStream.println:(I)V"
    owner: Optional[str] = None
    name: Optional[str] = None
    descriptor: Optional[str] = None


@dataclass(frozen=True)
class BranchTarget:
    offset: int


ResolvedOperand = Union[LocalSlot, Immediate, ConstantRef, BranchTarget]


@dataclass(frozen=True)
class Instruction:
    offset: int
    mnemonic: str
    operands: tuple[ResolvedOperand, ...] = ()


# Entry kinds each constant-index instruction may reference
_LOADABLE = (Integer, Float, StringRef, ClassRef, MethodType, MethodHandle, Dynamic)
_EXPECTED_KINDS = {
    "ldc": _LOADABLE,
    "ldc_w": _LOADABLE,
    "ldc2_w": (Long, Double, Dynamic),
    "getstatic": FieldRef,
    "putstatic": FieldRef,
    "getfield": FieldRef,
    "putfield": FieldRef,
    "invokevirtual": MethodRef,
    "invokespecial": (MethodRef, InterfaceMethodRef),
    "invokestatic": (MethodRef, InterfaceMethodRef),
    "invokeinterface": InterfaceMethodRef,
    "invokedynamic": InvokeDynamic,
    "new": ClassRef,
    "anewarray": ClassRef,
    "checkcast": ClassRef,
    "instanceof": ClassRef,
    "multianewarray": ClassRef,
}


def resolve_constant(pool: ConstantPool, index: int, mnemonic: str) -> ConstantRef:
    """Resolve a constant pool operand of ``mnemonic``."""
    entry = pool.lookup(index)
    expected = _EXPECTED_KINDS.get(mnemonic)
    if expected is not None and not isinstance(entry, expected):
        raise MalformedConstantReference(
            f"{mnemonic} cannot reference {type(entry).__name__} at index {index}")

    owner = name = descriptor = None
    if isinstance(entry, MemberRef):
        owner, name, descriptor = pool.member(index)
    elif isinstance(entry, MethodHandle):
        owner, name, descriptor = pool.member(entry.reference_index)
    elif isinstance(entry, (Dynamic, InvokeDynamic)):
        name, descriptor = pool.name_and_type(entry.name_and_type_index)
    elif isinstance(entry, MethodType):
        descriptor = pool.utf8(entry.descriptor_index)
    elif isinstance(entry, ClassRef):
        name = java_name(pool.utf8(entry.name_index))

    return ConstantRef(
        index=index,
        kind=type(entry).__name__,
        text=pool.describe(index),
        owner=java_name(owner) if owner else None,
        name=name,
        descriptor=descriptor,
    )


def _read_operands(cursor: ByteCursor, start: int, mnemonic: str, layout: str,
                   pool: ConstantPool, wide: bool) -> list:
    operands = []
    for code in layout:
        if code == "L":
            operands.append(LocalSlot(cursor.read_u2() if wide else cursor.read_u1()))
        elif code == "C":
            operands.append(resolve_constant(pool, cursor.read_u1(), mnemonic))
        elif code == "K":
            operands.append(resolve_constant(pool, cursor.read_u2(), mnemonic))
        elif code == "B":
            operands.append(Immediate(cursor.read_s2() if wide else cursor.read_s1()))
        elif code == "S":
            operands.append(Immediate(cursor.read_s2()))
        elif code == "U":
            operands.append(Immediate(cursor.read_u1()))
        elif code == "0":
            cursor.skip(1)
        elif code == "J":
            operands.append(BranchTarget(start + cursor.read_s2()))
        elif code == "W":
            operands.append(BranchTarget(start + cursor.read_s4()))
        else:
            raise ValueError(f"Unknown operand layout code {code!r} for {mnemonic}")
    return operands


def _skip_padding(cursor: ByteCursor):
    """Align to the next multiple of 4 from the start of the code array."""
    cursor.skip((4 - cursor.pos % 4) % 4)


def _read_tableswitch(cursor: ByteCursor, start: int) -> list:
    _skip_padding(cursor)
    default = cursor.read_s4()
    low = cursor.read_s4()
    high = cursor.read_s4()
    if high < low:
        raise MalformedInstruction(
            f"tableswitch at offset {start} has high {high} < low {low}")
    operands = [BranchTarget(start + default)]
    for key in range(low, high + 1):
        operands.append(Immediate(key))
        operands.append(BranchTarget(start + cursor.read_s4()))
    return operands


def _read_lookupswitch(cursor: ByteCursor, start: int) -> list:
    _skip_padding(cursor)
    default = cursor.read_s4()
    npairs = cursor.read_s4()
    if npairs < 0:
        raise MalformedInstruction(
            f"lookupswitch at offset {start} has negative pair count {npairs}")
    operands = [BranchTarget(start + default)]
    for _ in range(npairs):
        operands.append(Immediate(cursor.read_s4()))
        operands.append(BranchTarget(start + cursor.read_s4()))
    return operands


def iter_decode(code: bytes, pool: ConstantPool) -> Iterator[Instruction]:
    """Yield instructions in code order. Errors surface when reached."""
    cursor = ByteCursor(code)
    wide = False
    start = 0
    while cursor.remaining:
        start = cursor.pos
        opcode = cursor.read_u1()
        info = OPCODES.get(opcode)
        if info is None:
            raise UnknownOpcode(opcode, start)
        if wide and opcode not in WIDENABLE:
            raise MalformedInstruction(f"wide cannot modify {info.mnemonic} at offset {start}")

        try:
            if opcode == TABLESWITCH:
                operands = _read_tableswitch(cursor, start)
            elif opcode == LOOKUPSWITCH:
                operands = _read_lookupswitch(cursor, start)
            else:
                operands = _read_operands(cursor, start, info.mnemonic, info.layout, pool, wide)
        except UnexpectedEndOfInput as e:
            raise TruncatedInstruction(start, info.mnemonic) from e

        yield Instruction(start, info.mnemonic, tuple(operands))
        wide = opcode == WIDE

    if wide:
        raise TruncatedInstruction(start, "wide")


def decode(code: bytes, pool: ConstantPool) -> tuple[Instruction, ...]:
    """Decode a whole code array; fails without partial output."""
    return tuple(iter_decode(code, pool))
