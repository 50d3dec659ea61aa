"""
Writing rendered sheets to PDF, PNG and a manifest.
"""

# Standard Library
import json
import pathlib

# PIP3 modules
import PIL.Image
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config


SheetConfig = cte.config.SheetConfig
SheetGrid = cte.config.SheetGrid
BatchResult = cte.config.BatchResult

PROGRESS_BAR_WIDTH = cte.config.PROGRESS_BAR_WIDTH


#============================================
def format_sheet_progress(sheets_done: int, sheet_total: int, records_done: int) -> str:
	"""
	Build the one-line status shown while sheets render.

	Args:
		sheets_done: Sheets rendered so far.
		sheet_total: Sheets in the run.
		records_done: Coupons placed so far.

	Returns:
		Status line, e.g. "Sheets [==========----------] 1/2, 10 coupons".
	"""
	filled = PROGRESS_BAR_WIDTH * sheets_done // max(1, sheet_total)
	bar = "=" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	return f"Sheets [{bar}] {sheets_done}/{sheet_total}, {records_done} coupons"


def print_sheet_progress(sheets_done: int, sheet_total: int, records_done: int) -> None:
	if sheet_total <= 0:
		return
	print(format_sheet_progress(sheets_done, sheet_total, records_done), end="\r")


#============================================
def write_sheets_pdf(
	sheets: list[PIL.Image.Image],
	output_path: pathlib.Path,
	config: SheetConfig,
) -> int:
	"""
	Write sheets to a PDF, one sheet per full page.

	Args:
		sheets: Sheet images.
		output_path: Output PDF path.
		config: Sheet configuration, for the physical page size.

	Returns:
		Number of pages written.
	"""
	page_size = (config.page_width_pt, config.page_height_pt)
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=page_size)
	pdf.setTitle(output_path.name)
	for sheet in sheets:
		pdf.drawImage(
			reportlab.lib.utils.ImageReader(sheet),
			0,
			0,
			width=config.page_width_pt,
			height=config.page_height_pt,
			preserveAspectRatio=False,
		)
		pdf.showPage()
	pdf.save()
	return len(sheets)


#============================================
def write_sheet_pngs(
	sheets: list[PIL.Image.Image],
	output_dir: pathlib.Path,
	stem: str,
	dpi: int,
) -> list[pathlib.Path]:
	"""
	Save each sheet as a numbered PNG.

	Args:
		sheets: Sheet images.
		output_dir: Output directory, created if missing.
		stem: File name prefix.
		dpi: Resolution recorded in the PNG.

	Returns:
		Written paths in sheet order.
	"""
	output_dir.mkdir(parents=True, exist_ok=True)
	paths: list[pathlib.Path] = []
	for index, sheet in enumerate(sheets, start=1):
		path = output_dir / f"{stem}_{index:03d}.png"
		sheet.save(path, dpi=(dpi, dpi))
		paths.append(path)
	return paths


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	records_path: pathlib.Path,
	template_url: str,
	result: BatchResult,
	grid: SheetGrid,
	config: SheetConfig,
) -> None:
	"""
	Write a manifest JSON file describing a print run.

	Args:
		manifest_path: Output path.
		records_path: Records input file.
		template_url: Template URL used.
		result: Batch result.
		grid: Sheet grid used.
		config: Sheet configuration.
	"""
	data = {
		"records": str(records_path),
		"template": template_url,
		"total_records": result.total_records,
		"sheets": result.sheets,
		"per_page": result.per_page,
		"requested_per_page": result.requested_per_page,
		"layout": {
			"columns": grid.columns,
			"rows": grid.rows,
			"sheet_width": grid.sheet_width,
			"sheet_height": grid.sheet_height,
			"cell_width": grid.cell_width,
			"cell_height": grid.cell_height,
			"padding": grid.padding,
			"dpi": config.dpi,
			"page_width_pt": config.page_width_pt,
			"page_height_pt": config.page_height_pt,
			"draw_borders": config.draw_borders,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
