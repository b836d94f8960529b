"""
CLI entry points for production sheets to printable labels.
"""

# Standard Library
import argparse
import datetime
import pathlib
import time

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config
import meal_label_sheets.html_render
import meal_label_sheets.paginate
import meal_label_sheets.records
import meal_label_sheets.render


SheetConfig = mls.config.SheetConfig


#============================================
def build_config(args: argparse.Namespace) -> SheetConfig:
	"""
	Build sheet config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		SheetConfig.
	"""
	config = mls.config.build_default_config(
		draw_outlines=args.draw_outlines,
		calibration=args.calibration,
		draw_empty_slots=args.draw_empty_slots,
		max_pages=args.max_pages,
		logo_path=args.logo_path,
	)
	return config


#============================================
def resolve_dates(
	args: argparse.Namespace,
	file_use_by: str | None,
) -> tuple[datetime.date, datetime.date | str]:
	"""
	Resolve the batch date and use-by date.

	The command line wins over the input file; without either the use-by is
	today plus the default offset.

	Args:
		args: Parsed argparse namespace.
		file_use_by: Use-by date found in the input file.

	Returns:
		Tuple of (today, use_by_date).
	"""
	if args.today:
		today = datetime.date.fromisoformat(args.today)
	else:
		today = datetime.date.today()
	use_by_date = args.use_by or file_use_by
	if not use_by_date:
		use_by_date = mls.config.default_use_by_date(today)
	return (today, use_by_date)


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Convert meal production sheets to A4 label sheets.")
	parser.add_argument("input_path", help="Production JSON or CSV file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF or HTML path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	format_group = output_group.add_mutually_exclusive_group()
	format_group.add_argument(
		"--html", dest="output_format", action="store_const", const="html",
		help="Write the standalone download HTML instead of a PDF.",
	)
	format_group.add_argument(
		"--preview", dest="output_format", action="store_const", const="preview",
		help="Write the on-screen print preview HTML instead of a PDF.",
	)
	output_group.add_argument("--logo", dest="logo_path", default=None, help="Brand logo image.")

	dates_group = parser.add_argument_group("Dates")
	dates_group.add_argument("-u", "--use-by", dest="use_by", default=None, help="Use-by date YYYY-MM-DD.")
	dates_group.add_argument("-t", "--today", dest="today", default=None, help="Batch date YYYY-MM-DD (default today).")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	behavior_group.add_argument("-c", "--calibration", dest="calibration", action="store_true", help="Add a calibration page.")
	behavior_group.add_argument("-C", "--no-calibration", dest="calibration", action="store_false", help="Disable calibration page.")
	behavior_group.add_argument(
		"-e", "--empty-slots", dest="draw_empty_slots", action="store_true",
		help="Draw placeholders in unused slots.",
	)
	behavior_group.add_argument(
		"-E", "--no-empty-slots", dest="draw_empty_slots", action="store_false",
		help="Leave unused slots blank.",
	)
	behavior_group.add_argument("--debug", dest="debug", action="store_true", help="Show density banners in the preview.")
	behavior_group.add_argument(
		"--stop-before-rendering",
		dest="stop_before_rendering",
		action="store_true",
		help="Stop after paginating labels (skip rendering).",
	)

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("-g", "--max-pages", dest="max_pages", type=int, default=None, help="Limit number of label pages.")

	parser.set_defaults(
		output_format="pdf",
		draw_outlines=False,
		calibration=False,
		draw_empty_slots=True,
		debug=False,
		stop_before_rendering=False,
	)

	args = parser.parse_args()
	return args


#============================================
def write_html(
	args: argparse.Namespace,
	records: list[mls.records.ProductionRecord],
	config: SheetConfig,
	today: datetime.date,
	use_by_date: datetime.date | str,
	output_path: pathlib.Path,
) -> None:
	"""
	Write the preview or download HTML document.

	Args:
		args: Parsed argparse namespace.
		records: Production records.
		config: Sheet configuration.
		today: Batch date.
		use_by_date: Batch use-by date.
		output_path: Output HTML path.
	"""
	logo_uri = None
	if config.logo_path:
		logo_image = mls.render.load_logo_image(pathlib.Path(config.logo_path))
		logo_uri = mls.html_render.logo_data_uri(logo_image)
	if args.output_format == "preview":
		document = mls.html_render.build_preview_document(
			records, use_by_date, today, config, logo_uri, debug=args.debug,
		)
	else:
		document = mls.html_render.build_labels_document(records, use_by_date, today, config, logo_uri)
	output_path.write_text(document, encoding="utf-8")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from production input to printable labels.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Production to labels pipeline")
	print(f"Input: {args.input_path}")
	print(f"Output ({args.output_format}): {args.output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Draw outlines: {args.draw_outlines}")
	print(f"Calibration: {args.calibration}")
	print(f"Empty slot placeholders: {args.draw_empty_slots}")
	if args.max_pages is not None:
		print(f"Max pages: {args.max_pages}")
	if args.stop_before_rendering:
		print("Stop before rendering: True")

	start_time = time.perf_counter()
	input_path = pathlib.Path(args.input_path)
	records, file_use_by = mls.records.load_production_input(input_path)
	today, use_by_date = resolve_dates(args, file_use_by)
	use_by_text = mls.records.format_use_by_date(use_by_date, mls.config.default_use_by_date(today))
	load_end = time.perf_counter()
	print(f"Records loaded: {len(records)}")
	print(f"Use by: {use_by_text}")
	for meal_name, count in mls.paginate.label_counts(records).items():
		print(f"  {count:4d}  {meal_name}")

	config = build_config(args)
	pages, result = mls.paginate.plan_sheets(records, config)
	print(f"Labels: {result.total_labels} on {len(pages)} page(s)")
	if args.stop_before_rendering:
		print("Stopping before rendering.")
		total_time = time.perf_counter() - start_time
		print("Timing: load={:.2f}s total={:.2f}s".format(load_end - start_time, total_time))
		return

	output_path = pathlib.Path(args.output_path)
	render_start = time.perf_counter()
	if args.output_format == "pdf":
		result = mls.render.write_labels_pdf(records, output_path, config, use_by_date, today, show_progress=True)
		if result.pages == 0:
			print("No labels to print; PDF not written.")
	else:
		write_html(args, records, config, today, use_by_date, output_path)
	render_end = time.perf_counter()
	print(f"Pages written: {result.pages}")
	print(f"Labels printed: {result.printed_labels}")
	print(f"Labels leftover: {result.leftover_labels}")
	print(f"Empty slots: {result.empty_slots}")
	if result.text_clamps:
		print(f"Text blocks clamped at minimum size: {result.text_clamps}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	mls.render.write_manifest(
		pathlib.Path(manifest_path),
		input_path,
		records,
		use_by_text,
		result,
		config,
	)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: load={:.2f}s render={:.2f}s total={:.2f}s".format(
			load_end - start_time,
			render_end - render_start,
			total_time,
		)
	)
	print(f"Manifest written: {manifest_path}")


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	run_pipeline(args)
