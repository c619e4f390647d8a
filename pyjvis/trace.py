"""
Assembles decoded class files into per-method traces.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from .bytecode import Instruction
from .classreader import ClassInfo, ClassReader, MethodInfo
from .constpool import java_name
from .descriptor import DescriptorParser, MethodDescriptor

logger = logging.getLogger(__name__)

DEFAULT_KIND = "Controller"

# Mnemonic prefixes dropped by the default instruction filter
DEFAULT_SKIPPED_PREFIXES = ("iload_", "aload_")

InstructionFilter = Callable[[Instruction], bool]


def keep_all(instruction: Instruction) -> bool:
    return True


def skip_shorthand_loads(prefixes: Iterable[str] = DEFAULT_SKIPPED_PREFIXES) -> InstructionFilter:
    """Build a filter dropping operand-less instructions whose mnemonic starts with a prefix."""
    prefixes = tuple(prefixes)

    def keep(instruction: Instruction) -> bool:
        return bool(instruction.operands) or not instruction.mnemonic.startswith(prefixes)

    return keep


@dataclass(frozen=True)
class TracedMethod:
    name: str
    signature: str
    descriptor: MethodDescriptor
    access_flags: int
    instructions: tuple[Instruction, ...]


@dataclass(frozen=True)
class TracedClass:
    class_name: str
    kind: str
    methods: tuple[TracedMethod, ...]


class TraceAssembler:
    """Combines method descriptors and decoded code into a TracedClass."""

    def __init__(self, kind: str = DEFAULT_KIND, keep: Optional[InstructionFilter] = None):
        self.kind = kind
        self.keep = keep if keep is not None else skip_shorthand_loads()
        self._descriptors = DescriptorParser()

    def assemble_method(self, method: MethodInfo) -> TracedMethod:
        instructions = tuple(ins for ins in method.instructions if self.keep(ins))
        dropped = len(method.instructions) - len(instructions)
        if dropped:
            logger.debug("method %s: filtered %d instruction(s)", method.name, dropped)
        return TracedMethod(
            name=method.name,
            signature=method.descriptor,
            descriptor=self._descriptors.parse_method(method.descriptor),
            access_flags=method.access_flags,
            instructions=instructions,
        )

    def assemble(self, info: ClassInfo) -> TracedClass:
        return TracedClass(
            class_name=java_name(info.name),
            kind=self.kind,
            methods=tuple(self.assemble_method(m) for m in info.methods),
        )


def trace_class(data: bytes, kind: str = DEFAULT_KIND,
                keep: Optional[InstructionFilter] = None) -> TracedClass:
    """Decode class file bytes and assemble their trace."""
    info = ClassReader(data).read()
    return TraceAssembler(kind, keep).assemble(info)


def trace_file(path: str | Path, kind: str = DEFAULT_KIND,
               keep: Optional[InstructionFilter] = None) -> TracedClass:
    """Trace a single .class file."""
    return trace_class(Path(path).read_bytes(), kind, keep)
