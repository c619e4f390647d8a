"""
Renders traced classes as JSON-ready dictionaries.

Output shape::

    {"kind": ..., "clazz": ..., "method": [
        {"method": ..., "signature": ..., "input": [...], "output": ...,
         "ops": [{"op": ..., "var": ..., "type": ...}]}]}

``var`` and ``type`` are omitted when an instruction has no local slot or
resolved reference.
"""

import json
from typing import Optional

from .bytecode import BranchTarget, ConstantRef, Immediate, Instruction, LocalSlot
from .classreader import access_flag_names
from .trace import TracedClass, TracedMethod

_LITERAL_TYPES = {
    "Integer": "int",
    "Float": "float",
    "Long": "long",
    "Double": "double",
    "StringRef": "java.lang.String",
}

_MEMBER_KINDS = ("FieldRef", "MethodRef", "InterfaceMethodRef", "MethodHandle")


def _constant_var_type(ref: ConstantRef) -> tuple[Optional[str], Optional[str]]:
    if ref.kind in _MEMBER_KINDS:
        return f"{ref.owner}.{ref.name}", ref.descriptor
    if ref.kind in _LITERAL_TYPES:
        return ref.text, _LITERAL_TYPES[ref.kind]
    if ref.kind in ("Dynamic", "InvokeDynamic"):
        return ref.name, ref.descriptor
    if ref.kind == "MethodType":
        return None, ref.descriptor
    return ref.text, None


def var_and_type(instruction: Instruction) -> tuple:
    """The (var, type) pair of an instruction, from its first slot or reference."""
    for operand in instruction.operands:
        if isinstance(operand, LocalSlot):
            return operand.index, None
        if isinstance(operand, ConstantRef):
            return _constant_var_type(operand)
    return None, None


def operand_to_dict(operand) -> dict:
    if isinstance(operand, LocalSlot):
        return {"kind": "local", "value": operand.index}
    if isinstance(operand, Immediate):
        return {"kind": "immediate", "value": operand.value}
    if isinstance(operand, BranchTarget):
        return {"kind": "branch", "value": operand.offset}
    if isinstance(operand, ConstantRef):
        return {"kind": "constant", "index": operand.index, "value": operand.text}
    raise TypeError(f"Unknown operand type: {type(operand).__name__}")


def instruction_to_dict(instruction: Instruction, detailed: bool = False) -> dict:
    result = {"op": instruction.mnemonic}
    var, type_ = var_and_type(instruction)
    if var is not None:
        result["var"] = var
    if type_ is not None:
        result["type"] = type_
    if detailed:
        result["offset"] = instruction.offset
        result["operands"] = [operand_to_dict(op) for op in instruction.operands]
    return result


def method_to_dict(method: TracedMethod, detailed: bool = False) -> dict:
    result = {
        "method": method.name,
        "signature": method.signature,
        "input": [arg.descriptor for arg in method.descriptor.arguments],
        "output": method.descriptor.return_type.descriptor,
        "ops": [instruction_to_dict(ins, detailed) for ins in method.instructions],
    }
    if detailed:
        result["access"] = access_flag_names(method.access_flags)
    return result


def to_dict(traced: TracedClass, detailed: bool = False) -> dict:
    """Convert a traced class to a dictionary for JSON serialization."""
    return {
        "kind": traced.kind,
        "clazz": traced.class_name,
        "method": [method_to_dict(m, detailed) for m in traced.methods],
    }


def to_json(traced: TracedClass, indent: int = 2, detailed: bool = False) -> str:
    """Serialize to JSON string."""
    return json.dumps(to_dict(traced, detailed), indent=indent)
