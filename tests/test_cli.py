"""Tests for the command-line driver."""

import json
import zipfile

import pytest

from pyjvis.cli import main

from classwriter import MethodSpec, build_class, build_example_controller


@pytest.fixture
def class_file(tmp_path):
    path = tmp_path / "ExampleController.class"
    path.write_bytes(build_example_controller())
    return path


class TestTraceCommand:
    def test_writes_output_file(self, tmp_path, class_file):
        out = tmp_path / "out.json"
        main(["trace", str(class_file), "-o", str(out)])
        doc = json.loads(out.read_text())
        assert doc["clazz"] == "com.example.ExampleController"
        assert [m["method"] for m in doc["method"]] == ["<init>", "greet", "run"]

    def test_stdout_and_options(self, capsys, class_file):
        main(["trace", str(class_file), "--kind", "Endpoint", "--keep-all", "--indent", "0"])
        doc = json.loads(capsys.readouterr().out)
        assert doc["kind"] == "Endpoint"
        assert doc["method"][0]["ops"][0] == {"op": "aload_0"}

    def test_jar_traced_in_order(self, tmp_path, capsys):
        jar = tmp_path / "app.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
            zf.writestr("b/Second.class", build_class("b/Second", [MethodSpec("m", "()V", bytes([0xB1]))]))
            zf.writestr("a/First.class", build_class("a/First", [MethodSpec("m", "()V", bytes([0xB1]))]))
        main(["trace", str(jar), "-j", "2"])
        docs = json.loads(capsys.readouterr().out)
        assert [d["clazz"] for d in docs] == ["a.First", "b.Second"]

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["trace", str(tmp_path / "nope.class")])
        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_malformed_class(self, tmp_path, capsys):
        bad = tmp_path / "Bad.class"
        bad.write_bytes(b"not a class file")
        with pytest.raises(SystemExit) as exc_info:
            main(["trace", str(bad)])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Bad.class" in err
        assert "magic" in err

    @pytest.mark.parametrize("jobs", ["0", "-2", "many"])
    def test_rejects_bad_job_count(self, capsys, class_file, jobs):
        with pytest.raises(SystemExit) as exc_info:
            main(["trace", str(class_file), "-j", jobs])
        assert exc_info.value.code == 2
        assert "--jobs" in capsys.readouterr().err

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
