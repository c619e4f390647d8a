"""
JVM instruction set table: opcode -> mnemonic and operand layout.

Layouts are strings of operand field codes read left to right:

    L  local variable slot, u1 (u2 after wide)
    C  constant pool index, u1
    K  constant pool index, u2
    B  signed immediate, s1 (s2 after wide)
    S  signed immediate, s2
    U  unsigned immediate, u1
    0  reserved zero byte, skipped
    J  branch offset, s2
    W  branch offset, s4

tableswitch, lookupswitch and wide have no fixed layout and are handled by
the decoder.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OpcodeInfo:
    opcode: int
    mnemonic: str
    layout: str


# (first opcode, layout, mnemonics): consecutive opcodes sharing a layout
_OPCODE_ROWS = (
    (0x00, "", "nop aconst_null iconst_m1 iconst_0 iconst_1 iconst_2 iconst_3 "
               "iconst_4 iconst_5 lconst_0 lconst_1 fconst_0 fconst_1 fconst_2 "
               "dconst_0 dconst_1"),
    (0x10, "B", "bipush"),
    (0x11, "S", "sipush"),
    (0x12, "C", "ldc"),
    (0x13, "K", "ldc_w ldc2_w"),
    (0x15, "L", "iload lload fload dload aload"),
    (0x1A, "", "iload_0 iload_1 iload_2 iload_3 lload_0 lload_1 lload_2 lload_3 "
               "fload_0 fload_1 fload_2 fload_3 dload_0 dload_1 dload_2 dload_3 "
               "aload_0 aload_1 aload_2 aload_3 "
               "iaload laload faload daload aaload baload caload saload"),
    (0x36, "L", "istore lstore fstore dstore astore"),
    (0x3B, "", "istore_0 istore_1 istore_2 istore_3 lstore_0 lstore_1 lstore_2 "
               "lstore_3 fstore_0 fstore_1 fstore_2 fstore_3 dstore_0 dstore_1 "
               "dstore_2 dstore_3 astore_0 astore_1 astore_2 astore_3 "
               "iastore lastore fastore dastore aastore bastore castore sastore "
               "pop pop2 dup dup_x1 dup_x2 dup2 dup2_x1 dup2_x2 swap "
               "iadd ladd fadd dadd isub lsub fsub dsub imul lmul fmul dmul "
               "idiv ldiv fdiv ddiv irem lrem frem drem ineg lneg fneg dneg "
               "ishl lshl ishr lshr iushr lushr iand land ior lor ixor lxor"),
    (0x84, "LB", "iinc"),
    (0x85, "", "i2l i2f i2d l2i l2f l2d f2i f2l f2d d2i d2l d2f i2b i2c i2s "
               "lcmp fcmpl fcmpg dcmpl dcmpg"),
    (0x99, "J", "ifeq ifne iflt ifge ifgt ifle if_icmpeq if_icmpne if_icmplt "
                "if_icmpge if_icmpgt if_icmple if_acmpeq if_acmpne goto jsr"),
    (0xA9, "L", "ret"),
    (0xAA, "", "tableswitch lookupswitch "
               "ireturn lreturn freturn dreturn areturn return"),
    (0xB2, "K", "getstatic putstatic getfield putfield "
                "invokevirtual invokespecial invokestatic"),
    (0xB9, "KU0", "invokeinterface"),
    (0xBA, "K00", "invokedynamic"),
    (0xBB, "K", "new"),
    (0xBC, "U", "newarray"),
    (0xBD, "K", "anewarray"),
    (0xBE, "", "arraylength athrow"),
    (0xC0, "K", "checkcast instanceof"),
    (0xC2, "", "monitorenter monitorexit wide"),
    (0xC5, "KU", "multianewarray"),
    (0xC6, "J", "ifnull ifnonnull"),
    (0xC8, "W", "goto_w jsr_w"),
    # Reserved opcodes
    (0xCA, "", "breakpoint"),
    (0xFE, "", "impdep1 impdep2"),
)


def _build_table() -> dict[int, OpcodeInfo]:
    table = {}
    for first, layout, mnemonics in _OPCODE_ROWS:
        for opcode, mnemonic in enumerate(mnemonics.split(), start=first):
            table[opcode] = OpcodeInfo(opcode, mnemonic, layout)
    return table


OPCODES: dict[int, OpcodeInfo] = _build_table()

BY_MNEMONIC: dict[str, OpcodeInfo] = {info.mnemonic: info for info in OPCODES.values()}

TABLESWITCH = BY_MNEMONIC["tableswitch"].opcode
LOOKUPSWITCH = BY_MNEMONIC["lookupswitch"].opcode
WIDE = BY_MNEMONIC["wide"].opcode

# Instructions that may follow the wide prefix
WIDENABLE = frozenset(
    BY_MNEMONIC[m].opcode for m in (
        "iload", "lload", "fload", "dload", "aload",
        "istore", "lstore", "fstore", "dstore", "astore",
        "ret", "iinc",
    )
)

# newarray element type codes
ARRAY_TYPES = {
    4: "boolean", 5: "char", 6: "float", 7: "double",
    8: "byte", 9: "short", 10: "int", 11: "long",
}
