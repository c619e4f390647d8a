"""Tests for the descriptor parser."""

import pytest

from pyjvis.descriptor import (
    VOID,
    ArrayType,
    DescriptorParser,
    MethodDescriptor,
    ObjectType,
    PrimitiveType,
)
from pyjvis.errors import MalformedDescriptor


@pytest.fixture(scope="module")
def parser():
    return DescriptorParser()


class TestMethodDescriptors:
    def test_int_and_string_array_to_void(self, parser):
        result = parser.parse_method("(I[Ljava/lang/String;)V")
        assert isinstance(result, MethodDescriptor)
        assert result.arguments == (
            PrimitiveType("I"),
            ArrayType(ObjectType("java/lang/String")),
        )
        assert result.return_type == VOID

    def test_no_arguments(self, parser):
        result = parser.parse_method("()V")
        assert result.arguments == ()
        assert result.return_type == VOID
        assert str(result.return_type) == "void"

    def test_object_return(self, parser):
        result = parser.parse_method("(JD)Ljava/util/List;")
        assert [str(a) for a in result.arguments] == ["long", "double"]
        assert result.return_type == ObjectType("java/util/List")
        assert str(result.return_type) == "java.util.List"

    @pytest.mark.parametrize("text", [
        "()V",
        "(BCDFIJSZ)Z",
        "([[I[Ljava/lang/Object;)[[Ljava/lang/String;",
        "(Ljava/util/Map$Entry;Ljava/lang/String;)Ljava/lang/Object;",
    ])
    def test_descriptor_is_preserved(self, parser, text):
        assert parser.parse_method(text).descriptor == text

    def test_readable_form(self, parser):
        result = parser.parse_method("(I[Ljava/lang/String;)V")
        assert str(result) == "void (int, java.lang.String[])"

    @pytest.mark.parametrize("text", [
        "",
        "(I",
        "I",
        "(X)V",
        "(Ljava/lang/String)V",
        "(V)V",
        "([)V",
        "()",
        "()VV",
        "()[V",
    ])
    def test_malformed(self, parser, text):
        with pytest.raises(MalformedDescriptor):
            parser.parse_method(text)


class TestFieldDescriptors:
    def test_primitive(self, parser):
        assert parser.parse_field("Z") == PrimitiveType("Z")
        assert parser.parse_field("Z").name == "boolean"

    def test_nested_array(self, parser):
        result = parser.parse_field("[[J")
        assert result == ArrayType(ArrayType(PrimitiveType("J")))
        assert result.dimensions == 2
        assert str(result) == "long[][]"

    def test_object(self, parser):
        result = parser.parse_field("Ljava/lang/String;")
        assert result.class_name == "java/lang/String"
        assert result.descriptor == "Ljava/lang/String;"

    @pytest.mark.parametrize("text", ["V", "(I)V", "Ljava/lang/String", "[", "II"])
    def test_malformed(self, parser, text):
        with pytest.raises(MalformedDescriptor):
            parser.parse_field(text)
