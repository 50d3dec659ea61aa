"""
CLI entry points for coupon rendering.
"""

# Standard Library
import argparse
import logging
import pathlib
import time

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.export
import coupon_template_engine.paginate
import coupon_template_engine.records
import coupon_template_engine.render
import coupon_template_engine.settings
import coupon_template_engine.template_image


SheetConfig = cte.config.SheetConfig
BatchResult = cte.config.BatchResult

DEFAULT_DENSITY = cte.config.DEFAULT_DENSITY
DEFAULT_SHEET_DPI = cte.config.DEFAULT_SHEET_DPI
DEFAULT_TEMPLATE_URL = cte.config.DEFAULT_TEMPLATE_URL


#============================================
def build_sheet_config(args: argparse.Namespace) -> SheetConfig:
	"""
	Build sheet config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		SheetConfig.
	"""
	return SheetConfig(dpi=args.dpi, draw_borders=args.draw_borders)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list; sys.argv when None.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render coupon records onto a template.")
	parser.add_argument("records", help="Records file (.json array or .csv).")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-s", "--settings", dest="settings_path", default=None, help="Settings JSON path.")
	input_group.add_argument("-t", "--template", dest="template_url", default=None, help="Template URL or path (overrides settings).")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path, or PNG path with --single.")
	output_group.add_argument("-i", "--png-dir", dest="png_dir", default=None, help="Also write each sheet as PNG here.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-c", "--single", dest="single", action="store_true", help="Render only the first record as one coupon image.")
	behavior_group.add_argument("-p", "--per-page", dest="per_page", type=int, default=DEFAULT_DENSITY, help="Coupons per sheet (5, 10, 15, 20).")
	behavior_group.add_argument("-r", "--dpi", dest="dpi", type=int, default=DEFAULT_SHEET_DPI, help="Sheet resolution.")
	behavior_group.add_argument("-b", "--borders", dest="draw_borders", action="store_true", help="Draw coupon borders.")
	behavior_group.add_argument("-B", "--no-borders", dest="draw_borders", action="store_false", help="Disable coupon borders.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Log diagnostics.")

	parser.set_defaults(draw_borders=True, single=False, verbose=False)
	return parser.parse_args(argv)


#============================================
def run_pipeline(args: argparse.Namespace) -> BatchResult | None:
	"""
	Run the render pipeline from records to output files.

	Args:
		args: Parsed argparse namespace.

	Returns:
		BatchResult for sheet runs, None for a single coupon.
	"""
	records_path = pathlib.Path(args.records)
	settings = cte.settings.CouponSettings()
	if args.settings_path:
		settings = cte.settings.load_settings(pathlib.Path(args.settings_path))
	template_url = args.template_url or settings.background_template

	print("Coupon render pipeline")
	print(f"Records: {records_path}")
	print(f"Template: {template_url[:70]}")
	print(f"Output: {args.output_path}")

	start_time = time.perf_counter()
	records = cte.records.load_records(records_path)
	print(f"Records loaded: {len(records)}")
	layout = settings.layout_model()
	output_path = pathlib.Path(args.output_path)

	if args.single:
		if not records:
			print("No records; nothing to render.")
			return None
		template = cte.template_image.load_template_image(template_url, DEFAULT_TEMPLATE_URL)
		image = cte.render.render_coupon_image(records[0], layout, template)
		image.save(output_path)
		print(f"Coupon written: {output_path}")
		return None

	config = build_sheet_config(args)
	grid = cte.paginate.compute_sheet_grid(args.per_page, config)
	print(f"Per page: {grid.per_page} ({grid.columns} x {grid.rows})")

	if not records:
		print("No records; nothing to render.")
		return BatchResult(total_records=0, sheets=0, per_page=grid.per_page, requested_per_page=args.per_page)

	template = cte.template_image.load_template_image(template_url, DEFAULT_TEMPLATE_URL)
	total = -(-len(records) // grid.per_page)
	render_start = time.perf_counter()
	sheets = []
	cte.export.print_sheet_progress(0, total, 0)
	for sheet in cte.paginate.iter_sheet_images(records, layout, template, args.per_page, config):
		sheets.append(sheet)
		placed = min(len(records), len(sheets) * grid.per_page)
		cte.export.print_sheet_progress(len(sheets), total, placed)
	print()
	print(f"Render time: {time.perf_counter() - render_start:.2f}s")

	pages = cte.export.write_sheets_pdf(sheets, output_path, config)
	print(f"Pages written: {pages}")
	if args.png_dir:
		paths = cte.export.write_sheet_pngs(sheets, pathlib.Path(args.png_dir), output_path.stem, config.dpi)
		print(f"PNG sheets written: {len(paths)}")

	result = BatchResult(
		total_records=len(records),
		sheets=len(sheets),
		per_page=grid.per_page,
		requested_per_page=args.per_page,
	)
	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	cte.export.write_manifest(pathlib.Path(manifest_path), records_path, template_url, result, grid, config)
	print(f"Manifest written: {manifest_path}")
	print(f"Total time: {time.perf_counter() - start_time:.2f}s")
	return result


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	run_pipeline(args)
