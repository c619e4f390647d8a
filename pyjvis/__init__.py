"""pyjvis - decode JVM class files into structured method traces."""

from .bytecode import BranchTarget, ConstantRef, Immediate, Instruction, LocalSlot, decode
from .classreader import ClassInfo, ClassReader, MethodInfo, read_class_file
from .descriptor import DescriptorParser, MethodDescriptor
from .errors import (
    ClassFormatError,
    InvalidConstantIndex,
    MalformedConstantReference,
    MalformedDescriptor,
    MalformedInstruction,
    NotAClassFile,
    TruncatedInstruction,
    UnexpectedEndOfInput,
    UnknownConstantTag,
    UnknownOpcode,
)
from .serializer import to_dict, to_json
from .trace import (
    TraceAssembler,
    TracedClass,
    TracedMethod,
    keep_all,
    skip_shorthand_loads,
    trace_class,
    trace_file,
)

__version__ = "0.1.0"
__all__ = [
    "BranchTarget",
    "ClassFormatError",
    "ClassInfo",
    "ClassReader",
    "ConstantRef",
    "DescriptorParser",
    "Immediate",
    "Instruction",
    "InvalidConstantIndex",
    "LocalSlot",
    "MalformedConstantReference",
    "MalformedDescriptor",
    "MalformedInstruction",
    "MethodDescriptor",
    "MethodInfo",
    "NotAClassFile",
    "TraceAssembler",
    "TracedClass",
    "TracedMethod",
    "TruncatedInstruction",
    "UnexpectedEndOfInput",
    "UnknownConstantTag",
    "UnknownOpcode",
    "decode",
    "keep_all",
    "read_class_file",
    "skip_shorthand_loads",
    "to_dict",
    "to_json",
    "trace_class",
    "trace_file",
]
