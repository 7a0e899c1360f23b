"""Tests for the stencil-ocr command line interface."""

import json

import cv2
import pytest
import yaml

from stencil_ocr import cli

from conftest import CoordinateBackend, FailingCellBackend, make_coded_image

pytestmark = pytest.mark.integration


@pytest.fixture
def image_file(temp_dir):
    path = temp_dir / "table.png"
    cv2.imwrite(str(path), make_coded_image())
    return path


@pytest.fixture
def stencil_file(temp_dir):
    path = temp_dir / "stencil.yaml"
    path.write_text(yaml.safe_dump({
        "row_bounds": [0, 20, 40, 60],
        "col_bounds": [0, 30, 60, 90, 120],
    }))
    return path


@pytest.fixture
def fake_backend(monkeypatch):
    backend = CoordinateBackend()
    monkeypatch.setattr(cli, "backend_from_config", lambda config: backend)
    return backend


def test_csv_to_stdout(image_file, stencil_file, fake_backend, capsys):
    assert cli.main([str(image_file), "-s", str(stencil_file)]) == cli.EXIT_OK

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert lines[0] == '"0,0","0,1","0,2","0,3"'
    assert lines[2] == '"2,0","2,1","2,2","2,3"'


def test_csv_to_file(image_file, stencil_file, fake_backend, temp_dir):
    output = temp_dir / "out" / "table.csv"
    exit_code = cli.main([
        str(image_file), "-s", str(stencil_file), "-o", str(output), "--delimiter", ";",
    ])

    assert exit_code == cli.EXIT_OK
    assert output.read_text().splitlines()[1] == '"1,0";"1,1";"1,2";"1,3"'


def test_normalized_json_stencil(image_file, temp_dir, fake_backend, capsys):
    stencil = temp_dir / "stencil.json"
    stencil.write_text(json.dumps({
        "row_bounds": [0.0, 0.5, 1.0],
        "col_bounds": [0.0, 0.25, 1.0],
        "normalized": True,
    }))

    assert cli.main([str(image_file), "-s", str(stencil)]) == cli.EXIT_OK
    assert len(capsys.readouterr().out.splitlines()) == 2


def test_strict_reports_cell_failures(image_file, stencil_file, monkeypatch, capsys):
    backend = FailingCellBackend(failing=[(0, 0)])
    monkeypatch.setattr(cli, "backend_from_config", lambda config: backend)
    args = [str(image_file), "-s", str(stencil_file), "--failure-token", "??"]

    assert cli.main(args) == cli.EXIT_OK
    assert capsys.readouterr().out.startswith('"??","0,1"')
    assert cli.main(args + ["--strict"]) == cli.EXIT_CELL_FAILURES


def test_bad_stencil(image_file, temp_dir, fake_backend):
    stencil = temp_dir / "stencil.yaml"
    stencil.write_text(yaml.safe_dump({"row_bounds": [0, 40, 20], "col_bounds": [0, 30]}))

    assert cli.main([str(image_file), "-s", str(stencil)]) == cli.EXIT_ERROR
    assert fake_backend.calls == 0


def test_missing_image(stencil_file, temp_dir, fake_backend):
    assert cli.main([str(temp_dir / "nope.png"), "-s", str(stencil_file)]) == cli.EXIT_ERROR


def test_invalid_override(image_file, stencil_file, fake_backend, capsys):
    assert cli.main([str(image_file), "-s", str(stencil_file), "--retries", "99"]) == cli.EXIT_ERROR
    assert "Error" in capsys.readouterr().err


def test_overrides_reach_config(image_file, stencil_file, monkeypatch):
    seen = {}

    def capture(config):
        seen["backend"] = config
        return CoordinateBackend(jitter=0)

    monkeypatch.setattr(cli, "backend_from_config", capture)
    cli.main([str(image_file), "-s", str(stencil_file), "--command", "cuneiform", "--workers", "2"])

    assert seen["backend"].name == "command"
    assert seen["backend"].command == "cuneiform"


def test_command_backend(image_file, stencil_file, echo_ocr_template, capsys):
    exit_code = cli.main([
        str(image_file), "-s", str(stencil_file), "--command", echo_ocr_template, "--workers", "4",
    ])

    assert exit_code == cli.EXIT_OK
    rows = capsys.readouterr().out.splitlines()
    assert rows == ['"Total","Total","Total","Total"'] * 3
