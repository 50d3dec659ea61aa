import json
import pathlib

import PIL.Image
import pypdf
import pytest

import coupon_template_engine.cli as cli
import coupon_template_engine.config as config
import coupon_template_engine.export as export


#============================================
def write_records(path: pathlib.Path, count: int) -> pathlib.Path:
	"""
	Write a JSON records file with numbered employees.
	"""
	rows = [
		{
			"name": f"Employee {index}",
			"empId": f"E{index:03d}",
			"serialCode": f"CLV-{2000 + index}",
			"issueDate": "2024-03-05",
			"validTill": "2024-04-04",
			"amount": 75,
		}
		for index in range(count)
	]
	path.write_text(json.dumps(rows), encoding="utf-8")
	return path


#============================================
def test_pdf_pages_are_a4(tmp_path: pathlib.Path) -> None:
	"""
	Each sheet becomes one A4 page.
	"""
	sheet_config = config.SheetConfig(dpi=20)
	sheets = [PIL.Image.new("RGB", (165, 234), "white") for _ in range(3)]
	output = tmp_path / "sheets.pdf"
	assert export.write_sheets_pdf(sheets, output, sheet_config) == 3

	reader = pypdf.PdfReader(str(output))
	assert len(reader.pages) == 3
	box = reader.pages[0].mediabox
	assert float(box.width) == pytest.approx(595.27, abs=0.5)
	assert float(box.height) == pytest.approx(841.89, abs=0.5)


#============================================
def test_png_sheets_are_numbered(tmp_path: pathlib.Path) -> None:
	"""
	PNG sheets are written in order with a numbered suffix.
	"""
	sheets = [PIL.Image.new("RGB", (10, 10), "white") for _ in range(2)]
	paths = export.write_sheet_pngs(sheets, tmp_path / "png", "run", 20)
	assert [path.name for path in paths] == ["run_001.png", "run_002.png"]
	assert all(path.exists() for path in paths)


#============================================
def test_cli_batch_run(tmp_path: pathlib.Path, template_path: pathlib.Path) -> None:
	"""
	Seven records at five per page give a two page PDF and a manifest.
	"""
	records_path = write_records(tmp_path / "records.json", 7)
	output = tmp_path / "coupons.pdf"
	args = cli.parse_args([
		str(records_path),
		"-t", str(template_path),
		"-o", str(output),
		"-p", "5",
		"-r", "20",
	])
	result = cli.run_pipeline(args)
	assert result.total_records == 7
	assert result.sheets == 2
	assert result.per_page == 5

	assert len(pypdf.PdfReader(str(output)).pages) == 2
	manifest = json.loads((tmp_path / "coupons.pdf.json").read_text(encoding="utf-8"))
	assert manifest["sheets"] == 2
	assert manifest["layout"]["columns"] == 1
	assert manifest["layout"]["rows"] == 5


#============================================
def test_cli_snaps_unsupported_density(tmp_path: pathlib.Path, template_path: pathlib.Path) -> None:
	"""
	A per-page value of 12 prints ten per sheet and records the request.
	"""
	records_path = write_records(tmp_path / "records.json", 11)
	manifest_path = tmp_path / "run.json"
	cli.main([
		str(records_path),
		"-t", str(template_path),
		"-o", str(tmp_path / "out.pdf"),
		"-m", str(manifest_path),
		"-p", "12",
		"-r", "20",
		"-B",
	])
	manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert manifest["per_page"] == 10
	assert manifest["requested_per_page"] == 12
	assert manifest["sheets"] == 2
	assert manifest["layout"]["draw_borders"] is False


#============================================
def test_cli_single_coupon(tmp_path: pathlib.Path, template_path: pathlib.Path) -> None:
	"""
	Single mode writes the first record as a native size image.
	"""
	records_path = write_records(tmp_path / "records.json", 3)
	output = tmp_path / "coupon.png"
	cli.main([str(records_path), "-t", str(template_path), "-o", str(output), "-c"])
	with PIL.Image.open(output) as image:
		assert image.size == (1048, 598)


#============================================
def test_cli_without_records(tmp_path: pathlib.Path) -> None:
	"""
	An empty records file renders nothing and needs no template.
	"""
	records_path = write_records(tmp_path / "records.json", 0)
	output = tmp_path / "empty.pdf"
	args = cli.parse_args([str(records_path), "-t", "/no/such/template.png", "-o", str(output)])
	result = cli.run_pipeline(args)
	assert result.sheets == 0
	assert not output.exists()


#============================================
def test_cli_reads_csv_and_settings(tmp_path: pathlib.Path, template_path: pathlib.Path) -> None:
	"""
	CSV records and a saved settings file drive the batch.
	"""
	records_path = tmp_path / "records.csv"
	records_path.write_text("name,empId,serialCode,amount\nAsha,E1,S1,50\nRavi,E2,S2,60\n", encoding="utf-8")
	settings_path = tmp_path / "settings.json"
	settings_path.write_text(
		json.dumps({"qrEnabled": "true", "amountVisible": "false", "backgroundTemplate": str(template_path)}),
		encoding="utf-8",
	)
	args = cli.parse_args([str(records_path), "-s", str(settings_path), "-o", str(tmp_path / "out.pdf"), "-r", "20"])
	result = cli.run_pipeline(args)
	assert result.total_records == 2
	assert result.sheets == 1


#============================================
def test_sheet_progress_line() -> None:
	"""
	The progress line shows sheets done and coupons placed.
	"""
	assert export.format_sheet_progress(1, 2, 10) == "Sheets [==========----------] 1/2, 10 coupons"
	assert export.format_sheet_progress(0, 3, 0).startswith("Sheets [--------------------] 0/3")
