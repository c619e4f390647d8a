"""
Exceptions raised while decoding class files.
"""


class ClassFormatError(Exception):
    """Error while decoding a class file."""
    pass


class NotAClassFile(ClassFormatError):
    """Input does not start with the class file magic number."""
    pass


class UnexpectedEndOfInput(ClassFormatError):
    """A read needed more bytes than remain in the input."""
    pass


class TruncatedInstruction(UnexpectedEndOfInput):
    """An instruction's operands run past the end of the code array."""

    def __init__(self, offset: int, mnemonic: str):
        super().__init__(f"Truncated instruction {mnemonic} at offset {offset}")
        self.offset = offset
        self.mnemonic = mnemonic


class InvalidConstantIndex(ClassFormatError):
    """Constant pool index is 0, out of range or a placeholder slot."""

    def __init__(self, index: int, reason: str = "out of range"):
        super().__init__(f"Invalid constant pool index {index}: {reason}")
        self.index = index


class MalformedConstantReference(ClassFormatError):
    """A constant pool entry refers to an entry of the wrong kind."""
    pass


class UnknownConstantTag(ClassFormatError):
    """Constant pool entry with an undefined tag byte."""
    pass


class UnknownOpcode(ClassFormatError):
    """Byte not present in the instruction set table."""

    def __init__(self, opcode: int, offset: int):
        super().__init__(f"Unknown opcode 0x{opcode:02x} at offset {offset}")
        self.opcode = opcode
        self.offset = offset


class MalformedInstruction(ClassFormatError):
    """Instruction with structurally invalid operands."""
    pass


class MalformedDescriptor(ClassFormatError):
    """Descriptor string does not follow the descriptor grammar."""
    pass
