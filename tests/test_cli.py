"""Tests for the command line entry point."""

import json

import pytest

from treescript.cli import main
from treescript.containers import Container


CAR = {
    "roots": [{
        "class_name": "Model",
        "name": "Car",
        "properties": {"PrimaryPart": {"$ref": "body"}},
        "children": [
            {"class_name": "Part", "name": "Body", "id": "body", "properties": {"Anchored": True}},
        ],
    }],
}


@pytest.fixture
def write_tree(tmp_path):
    def write(doc):
        path = tmp_path / "tree.json"
        path.write_text(json.dumps(doc))
        return str(path)
    return write


def folders(count):
    return {"roots": [{"class_name": "Folder", "name": "Root",
                       "children": [{"class_name": "Folder"} for _ in range(count)]}]}


# =============================================================================
# Success
# =============================================================================

class TestSuccess:

    def test_prints_flat_source(self, write_tree, capsys):
        assert main([write_tree(CAR)]) == 0
        out = capsys.readouterr().out
        assert out.startswith('local Car = Instance.new("Model")\nCar.Name = "Car"\n')
        assert "Body.Anchored = true\n" in out
        assert "Body.Parent = Car\n" in out
        assert "Car.PrimaryPart = Body\n" in out

    def test_compact(self, write_tree, capsys):
        assert main([write_tree(CAR), "--compact"]) == 0
        out = capsys.readouterr().out
        assert out.startswith('local a=Instance.new"Model"\n')
        assert "a.PrimaryPart=b\n" in out

    def test_parent_and_module(self, write_tree, capsys):
        assert main([write_tree(CAR), "--parent", "--module"]) == 0
        out = capsys.readouterr().out
        assert "Car.Parent = workspace\nreturn Car" in out

    def test_json(self, write_tree, capsys):
        assert main([write_tree(folders(250)), "--json"]) == 0
        container = Container.model_validate_json(capsys.readouterr().out)
        assert container.find("Root") is not None
        assert len(container.find("Root").children) == 250

    def test_output_directory(self, write_tree, tmp_path):
        out_dir = tmp_path / "out"
        assert main([write_tree(folders(250)), "-o", str(out_dir)]) == 0
        main_file = out_dir / "SerializerOutput.server.lua"
        assert main_file.read_text().startswith("Root = require(script.Root)")
        assert (out_dir / "SerializerOutput" / "Root.lua").exists()
        assert (out_dir / "SerializerOutput" / "Root" / "Folder.lua").exists()


# =============================================================================
# Failures
# =============================================================================

class TestFailures:

    def test_split_needs_destination(self, write_tree, capsys):
        assert main([write_tree(folders(250))]) == 1
        assert "--output" in capsys.readouterr().err

    def test_locked_root(self, write_tree, capsys):
        doc = {"roots": [{"class_name": "Folder", "locked": True}]}
        assert main([write_tree(doc)]) == 1
        assert "context restrictions" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 2

    def test_invalid_document(self, write_tree, capsys):
        assert main([write_tree({"roots": [{"name": "NoClass"}]})]) == 2

    def test_no_roots(self, write_tree, capsys):
        assert main([write_tree({"roots": []})]) == 2
        assert "no roots" in capsys.readouterr().err

    def test_unknown_class(self, write_tree, capsys):
        assert main([write_tree({"roots": [{"class_name": "Spaceship"}]})]) == 2
