import json
import pathlib
import sys

import pypdf
import pytest

import meal_label_sheets.cli as cli


#============================================
def _write_input(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	Write a small production file.
	"""
	input_path = tmp_path / "production.json"
	data = {
		"useByDate": "2025-09-19",
		"mealProduction": [
			{"mealName": "Chicken Tikka", "quantity": 6, "ingredients": "Chicken, Milk Powder", "allergens": "Milk"},
			{"mealName": "Beef Chilli", "quantity": 5},
		],
	}
	input_path.write_text(json.dumps(data), encoding="utf-8")
	return input_path


#============================================
def _run(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
	"""
	Run the CLI with the given arguments.
	"""
	monkeypatch.setattr(sys, "argv", ["production_to_labels.py"] + argv)
	cli.main()


#============================================
def test_cli_writes_pdf_and_manifest(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	The default output is a PDF with a manifest beside it.
	"""
	input_path = _write_input(tmp_path)
	output_pdf = tmp_path / "labels.pdf"
	_run(monkeypatch, [str(input_path), "-o", str(output_pdf), "-t", "2025-09-14"])
	assert len(pypdf.PdfReader(str(output_pdf)).pages) == 2
	manifest = json.loads((tmp_path / "labels.pdf.json").read_text(encoding="utf-8"))
	assert manifest["total_labels"] == 11
	assert manifest["use_by_date"] == "Fri, 19/09/2025"
	assert manifest["label_counts"] == {"Chicken Tikka": 6, "Beef Chilli": 5}


#============================================
def test_cli_html_uses_command_line_use_by(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	The command line use-by wins over the file's value.
	"""
	input_path = _write_input(tmp_path)
	output_html = tmp_path / "labels.html"
	_run(monkeypatch, [str(input_path), "-o", str(output_html), "--html", "-u", "2025-09-22", "-t", "2025-09-14"])
	document = output_html.read_text(encoding="utf-8")
	assert "USE BY: Mon, 22/09/2025" in document
	assert "<title>Meal Labels - 14/09/2025</title>" in document


#============================================
def test_cli_preview(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	The preview output carries the printing instructions.
	"""
	input_path = _write_input(tmp_path)
	output_html = tmp_path / "preview.html"
	_run(monkeypatch, [str(input_path), "-o", str(output_html), "--preview", "-t", "2025-09-14"])
	assert "Printing Instructions:" in output_html.read_text(encoding="utf-8")


#============================================
def test_cli_stop_before_rendering(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	Stopping before rendering writes no output.
	"""
	input_path = _write_input(tmp_path)
	output_pdf = tmp_path / "labels.pdf"
	_run(monkeypatch, [str(input_path), "-o", str(output_pdf), "--stop-before-rendering"])
	assert not output_pdf.exists()
