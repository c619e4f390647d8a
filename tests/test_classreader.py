"""Tests for the class file reader."""

import struct

import pytest

from pyjvis.classreader import ClassReader, access_flag_names, read_class_file
from pyjvis.errors import ClassFormatError, NotAClassFile, UnexpectedEndOfInput

from classwriter import MethodSpec, build_class, build_example_controller


@pytest.fixture
def example_bytes():
    return build_example_controller()


class TestClassReader:
    def test_header_and_class_refs(self, example_bytes):
        info = ClassReader(example_bytes).read()
        assert info.version == (52, 0)
        assert info.name == "com/example/ExampleController"
        assert info.super_class == "java/lang/Object"
        assert info.interfaces == ("java/lang/Runnable",)
        assert info.source_file == "ExampleController.java"

    def test_methods(self, example_bytes):
        info = ClassReader(example_bytes).read()
        assert [m.name for m in info.methods] == ["<init>", "greet", "run"]
        assert info.methods[1].descriptor == "(Ljava/lang/String;I)Ljava/lang/String;"

    def test_code_attribute(self, example_bytes):
        greet = ClassReader(example_bytes).read().methods[1]
        assert greet.code.max_stack == 4
        assert len(greet.code.code) == 16
        assert [ins.offset for ins in greet.instructions] == [0, 3, 5, 8, 9, 12, 13, 14, 15]
        assert greet.instructions[4].mnemonic == "ifle"

    def test_method_without_code(self, example_bytes):
        run = ClassReader(example_bytes).read().methods[2]
        assert run.code is None
        assert run.instructions == ()
        assert access_flag_names(run.access_flags) == ["public", "abstract"]

    def test_class_without_super(self):
        data = build_class("java/lang/Object", [MethodSpec("<init>", "()V", bytes([0xB1]))],
                           super_class=None)
        info = ClassReader(data).read()
        assert info.super_class is None
        assert info.methods[0].instructions[0].mnemonic == "return"

    def test_read_class_file(self, tmp_path, example_bytes):
        path = tmp_path / "ExampleController.class"
        path.write_bytes(example_bytes)
        assert read_class_file(path).name == "com/example/ExampleController"


class TestMalformedInput:
    def test_bad_magic(self, example_bytes):
        with pytest.raises(NotAClassFile):
            ClassReader(b"\xca\xfe\xba\xbf" + example_bytes[4:]).read()

    def test_too_short_for_magic(self):
        with pytest.raises(NotAClassFile):
            ClassReader(b"\xca\xfe").read()

    def test_every_truncation_fails(self, example_bytes):
        for length in range(4, len(example_bytes)):
            with pytest.raises(UnexpectedEndOfInput):
                ClassReader(example_bytes[:length]).read()

    def test_trailing_bytes_after_class(self, example_bytes):
        with pytest.raises(ClassFormatError, match="trailing"):
            ClassReader(example_bytes + b"garbage").read()

    def test_code_attribute_length_mismatch(self):
        data = bytearray(build_class("Foo", [MethodSpec("m", "()V", bytes([0xB1]))]))
        # Grow the Code attribute's declared length by patching its u4 length field
        code_body = struct.pack(">HH", 4, 4) + struct.pack(">I", 1) + bytes([0xB1])
        pos = data.find(code_body)
        length = struct.unpack_from(">I", data, pos - 4)[0]
        struct.pack_into(">I", data, pos - 4, length + 2)
        data[pos + length:pos + length] = b"\x00\x00"
        with pytest.raises(ClassFormatError):
            ClassReader(bytes(data)).read()
