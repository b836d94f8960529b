"""
PDF rendering and imposition of label sheets.

Each distinct production record is drawn once as a label-sized tile with
ReportLab, then the tile is stamped into every slot it occupies on the A4
pages with pypdf.
"""

# Standard Library
import dataclasses
import datetime
import io
import json
import pathlib
import re
import typing

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config
import meal_label_sheets.content_fit
import meal_label_sheets.ingredients
import meal_label_sheets.paginate
import meal_label_sheets.records


SheetConfig = mls.config.SheetConfig
SheetResult = mls.config.SheetResult
LabelView = mls.records.LabelView
ProductionRecord = mls.records.ProductionRecord
Page = mls.paginate.Page

mm_to_points = mls.config.mm_to_points

PX_TO_POINTS = mls.config.PX_TO_POINTS
LINE_HEIGHT = mls.config.LINE_HEIGHT
MIN_FONT_PX = mls.config.MIN_FONT_PX
LOGO_HEIGHT_MM = mls.config.LOGO_HEIGHT_MM
BRAND_NAME = mls.config.BRAND_NAME
BRAND_TAGLINE = mls.config.BRAND_TAGLINE
WEBSITE_URL = mls.config.WEBSITE_URL
EMPTY_SLOT_TEXT = mls.config.EMPTY_SLOT_TEXT
DEFAULT_STORAGE_INSTRUCTIONS = mls.config.DEFAULT_STORAGE_INSTRUCTIONS
DEFAULT_HEATING_INSTRUCTIONS = mls.config.DEFAULT_HEATING_INSTRUCTIONS
NOT_SPECIFIED_TEXT = mls.config.NOT_SPECIFIED_TEXT
DEFAULT_FONT_REGULAR = mls.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = mls.config.DEFAULT_FONT_BOLD
PROGRESS_BAR_WIDTH = mls.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = mls.config.PROGRESS_UPDATE_EVERY

FIT_STEP = 0.25
ELLIPSIS = "…"
CALIBRATION_RULER_MM = 10.0


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color string into RGB floats.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (r, g, b) in 0.0-1.0 range.
	"""
	if not value or not value.startswith("#") or len(value) != 7:
		return (0.0, 0.0, 0.0)
	red = int(value[1:3], 16) / 255.0
	green = int(value[3:5], 16) / 255.0
	blue = int(value[5:7], 16) / 255.0
	return (red, green, blue)


#============================================
def map_font_name(bold: bool) -> str:
	"""
	Map a text style to a PDF font name.

	Args:
		bold: Bold flag.

	Returns:
		ReportLab font name.
	"""
	if bold:
		return DEFAULT_FONT_BOLD
	return DEFAULT_FONT_REGULAR


#============================================
def px_to_points(size: float) -> float:
	"""
	Convert a CSS px font size to points.
	"""
	return size * PX_TO_POINTS


#============================================
def split_words(runs: list[tuple[str, bool]]) -> list[tuple[str, bool]]:
	"""
	Split styled runs into words that keep their trailing whitespace.

	Args:
		runs: List of (text, bold).

	Returns:
		List of (word, bold).
	"""
	words: list[tuple[str, bool]] = []
	for text, bold in runs:
		for piece in re.findall(r"\S+\s*|\s+", text):
			words.append((piece, bold))
	return words


#============================================
def runs_width(runs: list[tuple[str, bool]], font_size: float) -> float:
	"""
	Measure the width of styled runs.

	Args:
		runs: List of (text, bold).
		font_size: Font size in points.

	Returns:
		Width in points.
	"""
	total = 0.0
	for text, bold in runs:
		total += reportlab.pdfbase.pdfmetrics.stringWidth(text, map_font_name(bold), font_size)
	return total


#============================================
def wrap_runs(runs: list[tuple[str, bool]], max_width: float, font_size: float) -> list[list[tuple[str, bool]]]:
	"""
	Greedy word wrap for styled runs.

	A single word wider than max_width gets a line of its own.

	Args:
		runs: List of (text, bold).
		max_width: Line width in points.
		font_size: Font size in points.

	Returns:
		Lines, each a list of (text, bold).
	"""
	lines: list[list[tuple[str, bool]]] = []
	current: list[tuple[str, bool]] = []
	current_width = 0.0
	for piece, bold in split_words(runs):
		font_name = map_font_name(bold)
		piece_width = reportlab.pdfbase.pdfmetrics.stringWidth(piece.rstrip(), font_name, font_size)
		if current and current_width + piece_width > max_width:
			lines.append(current)
			current = []
			current_width = 0.0
			piece = piece.lstrip()
			if not piece:
				continue
		current.append((piece, bold))
		current_width += reportlab.pdfbase.pdfmetrics.stringWidth(piece, font_name, font_size)
	if current:
		lines.append(current)
	return lines


#============================================
def fit_runs(
	runs: list[tuple[str, bool]],
	max_width: float,
	max_height: float,
	font_size: float,
	min_font_size: float,
) -> tuple[float, list[list[tuple[str, bool]]], bool]:
	"""
	Shrink styled text until it fits a box.

	When the text still overflows at min_font_size, the lines that fit are
	kept and the last one ends with an ellipsis.

	Args:
		runs: List of (text, bold).
		max_width: Box width in points.
		max_height: Box height in points.
		font_size: Starting font size in points.
		min_font_size: Smallest allowed font size in points.

	Returns:
		Tuple of (font_size, lines, clamped).
	"""
	size = font_size
	while True:
		lines = wrap_runs(runs, max_width, size)
		if len(lines) * size * LINE_HEIGHT <= max_height:
			return (size, lines, False)
		if size <= min_font_size:
			break
		size = max(min_font_size, size - FIT_STEP)
	max_lines = max(1, int(max_height // (size * LINE_HEIGHT)))
	lines = lines[:max_lines]
	text, bold = lines[-1][-1]
	lines[-1] = lines[-1][:-1] + [(text.rstrip() + ELLIPSIS, bold)]
	return (size, lines, True)


#============================================
def draw_runs(
	pdf: reportlab.pdfgen.canvas.Canvas,
	line: list[tuple[str, bool]],
	x: float,
	y: float,
	font_size: float,
) -> None:
	"""
	Draw one line of styled runs starting at a baseline point.

	Args:
		pdf: ReportLab canvas.
		line: List of (text, bold).
		x: Left edge in points.
		y: Baseline in points.
		font_size: Font size in points.
	"""
	for text, bold in line:
		font_name = map_font_name(bold)
		pdf.setFont(font_name, font_size)
		pdf.drawString(x, y, text)
		x += pdf.stringWidth(text, font_name, font_size)


#============================================
def draw_centered_line(
	pdf: reportlab.pdfgen.canvas.Canvas,
	text: str,
	center_x: float,
	y: float,
	font_size: float,
	bold: bool,
	color: str,
) -> None:
	"""
	Draw a single centered line of text.

	Args:
		pdf: ReportLab canvas.
		text: Text to draw.
		center_x: Horizontal center in points.
		y: Baseline in points.
		font_size: Font size in points.
		bold: Bold flag.
		color: Hex color.
	"""
	red, green, blue = parse_hex_color(color)
	pdf.setFillColorRGB(red, green, blue)
	pdf.setFont(map_font_name(bold), font_size)
	pdf.drawCentredString(center_x, y, text)


#============================================
def load_logo_image(path: pathlib.Path) -> PIL.Image.Image:
	"""
	Load the brand logo.

	Args:
		path: Image path.

	Returns:
		Loaded PIL image.
	"""
	if not path.exists():
		raise FileNotFoundError(f"Logo not found: {path}")
	image = PIL.Image.open(path)
	image.load()
	return image


#============================================
def build_ingredient_runs(view: LabelView, analysis: "mls.content_fit.ContentAnalysis") -> list[tuple[str, bool]]:
	"""
	Build the ingredient block as styled runs, allergens in bold.

	Args:
		view: Label view.
		analysis: Content analysis for abbreviation.

	Returns:
		List of (text, bold).
	"""
	runs: list[tuple[str, bool]] = [("Ingredients: ", True)]
	formatted = mls.ingredients.format_ingredients(view.ingredients, view.allergens)
	if formatted == NOT_SPECIFIED_TEXT:
		runs.append((NOT_SPECIFIED_TEXT, False))
		return runs
	for index, line in enumerate(formatted.split("\n")):
		if index > 0:
			runs.append((" ", False))
		for text, bold in mls.ingredients.split_markup(line):
			runs.append((mls.content_fit.abbreviate_ingredient(text, analysis), bold))
	return runs


#============================================
def draw_label_tile(
	pdf: reportlab.pdfgen.canvas.Canvas,
	view: LabelView,
	config: SheetConfig,
	fallback_use_by: datetime.date | None = None,
	logo: reportlab.lib.utils.ImageReader | None = None,
) -> int:
	"""
	Draw one label onto a label-sized canvas.

	Args:
		pdf: ReportLab canvas sized to the label.
		view: Label view.
		config: Sheet configuration.
		fallback_use_by: Date shown when the view's use-by is missing or invalid.
		logo: Optional logo image.

	Returns:
		Number of text blocks clamped at the minimum font size.
	"""
	width = mm_to_points(config.label_width)
	height = mm_to_points(config.label_height)
	padding = mm_to_points(config.label_padding)
	left = padding
	inner_width = width - 2.0 * padding
	center_x = width / 2.0
	min_size = px_to_points(MIN_FONT_PX)
	analysis = mls.content_fit.analyze_content(view)
	sizes = mls.content_fit.font_sizes_for(analysis)
	clamp_count = 0

	pdf.saveState()
	clip = pdf.beginPath()
	clip.rect(0, 0, width, height)
	pdf.clipPath(clip, stroke=0, fill=0)
	red, green, blue = parse_hex_color(mls.config.LABEL_BORDER_COLOR)
	pdf.setStrokeColorRGB(red, green, blue)
	pdf.setLineWidth(0.75)
	pdf.rect(0, 0, width, height, stroke=1, fill=0)

	cursor = height - padding
	if logo is not None:
		logo_height = mm_to_points(LOGO_HEIGHT_MM)
		image_width, image_height = logo.getSize()
		logo_width = logo_height * image_width / image_height
		cursor -= logo_height
		pdf.drawImage(
			logo,
			center_x - logo_width / 2.0,
			cursor,
			width=logo_width,
			height=logo_height,
			mask="auto",
		)
	else:
		brand_size = px_to_points(mls.config.BRAND_FONT_PX)
		cursor -= brand_size
		draw_centered_line(pdf, BRAND_NAME, center_x, cursor, brand_size, True, mls.config.BRAND_COLOR)
		cursor -= brand_size * (LINE_HEIGHT - 1.0)

	# meal name, at most two lines
	name_size = px_to_points(sizes.meal_name)
	name_size, name_lines, clamped = fit_runs(
		[(view.meal_name, True)], inner_width, 2.0 * name_size * LINE_HEIGHT, name_size, min_size,
	)
	clamp_count += int(clamped)
	for line in name_lines:
		cursor -= name_size
		text = "".join(part for part, _bold in line).strip()
		draw_centered_line(pdf, text, center_x, cursor, name_size, True, mls.config.TEXT_COLOR)
		cursor -= name_size * (LINE_HEIGHT - 1.0)

	tagline_size = px_to_points(mls.config.TAGLINE_FONT_PX)
	cursor -= tagline_size
	draw_centered_line(pdf, BRAND_TAGLINE, center_x, cursor, tagline_size, False, mls.config.MUTED_TEXT_COLOR)
	cursor -= tagline_size * (LINE_HEIGHT - 1.0)

	# nutrition, 2 x 2
	value_size = px_to_points(sizes.nutrition_value)
	label_size = px_to_points(sizes.nutrition_label)
	nutrition = (
		(mls.records.format_amount(view.calories), "KCAL"),
		(mls.records.format_amount(view.protein) + "g", "PROTEIN"),
		(mls.records.format_amount(view.fat) + "g", "FAT"),
		(mls.records.format_amount(view.carbs) + "g", "CARBS"),
	)
	cell_width = inner_width / 2.0
	for row_start in (0, 2):
		cursor -= value_size
		for offset in (0, 1):
			value, name = nutrition[row_start + offset]
			value_width = pdf.stringWidth(value + " ", DEFAULT_FONT_BOLD, value_size)
			name_width = pdf.stringWidth(name, DEFAULT_FONT_REGULAR, label_size)
			cell_x = left + offset * cell_width + (cell_width - value_width - name_width) / 2.0
			red, green, blue = parse_hex_color(mls.config.BRAND_COLOR)
			pdf.setFillColorRGB(red, green, blue)
			pdf.setFont(DEFAULT_FONT_BOLD, value_size)
			pdf.drawString(cell_x, cursor, value + " ")
			red, green, blue = parse_hex_color(mls.config.MUTED_TEXT_COLOR)
			pdf.setFillColorRGB(red, green, blue)
			pdf.setFont(DEFAULT_FONT_REGULAR, label_size)
			pdf.drawString(cell_x + value_width, cursor, name)
		cursor -= value_size * (LINE_HEIGHT - 1.0)

	# use-by band
	use_by_text = "USE BY: " + mls.records.format_use_by_date(view.use_by_date, fallback_use_by)
	use_by_size = px_to_points(sizes.use_by)
	band_height = use_by_size * LINE_HEIGHT + 2.0
	cursor -= 1.0
	red, green, blue = parse_hex_color(mls.config.USE_BY_BACKGROUND)
	pdf.setFillColorRGB(red, green, blue)
	pdf.roundRect(left, cursor - band_height, inner_width, band_height, 2.0, stroke=0, fill=1)
	red, green, blue = parse_hex_color(mls.config.TEXT_COLOR)
	pdf.setFillColorRGB(red, green, blue)
	pdf.setFont(DEFAULT_FONT_BOLD, use_by_size)
	pdf.drawString(left + 2.0, cursor - band_height + (band_height - use_by_size) / 2.0 + 1.0, use_by_text)
	cursor -= band_height + 1.0

	# storage and heating, one line each
	instruction_size = px_to_points(sizes.instructions)
	red, green, blue = parse_hex_color(mls.config.MUTED_TEXT_COLOR)
	pdf.setFillColorRGB(red, green, blue)
	for text in (
		view.storage_instructions or DEFAULT_STORAGE_INSTRUCTIONS,
		view.heating_instructions or DEFAULT_HEATING_INSTRUCTIONS,
	):
		size, lines, clamped = fit_runs(
			[(text, False)], inner_width, instruction_size * LINE_HEIGHT, instruction_size, min_size,
		)
		clamp_count += int(clamped)
		cursor -= size
		draw_runs(pdf, lines[0], left, cursor, size)
		cursor -= size * (LINE_HEIGHT - 1.0)

	# footer and allergens are laid out from the bottom up
	footer_size = px_to_points(sizes.footer)
	draw_centered_line(pdf, WEBSITE_URL, center_x, padding, footer_size, False, mls.config.BRAND_COLOR)
	bottom = padding + footer_size * LINE_HEIGHT

	ingredient_size = px_to_points(sizes.ingredients)
	red, green, blue = parse_hex_color(mls.config.TEXT_COLOR)
	pdf.setFillColorRGB(red, green, blue)
	allergens = mls.ingredients.format_allergens(view.allergens)
	if allergens:
		allergen_lines = wrap_runs([("Allergens: " + allergens, True)], inner_width, ingredient_size)
		for line in reversed(allergen_lines):
			draw_runs(pdf, line, left, bottom + ingredient_size * (LINE_HEIGHT - 1.0), ingredient_size)
			bottom += ingredient_size * LINE_HEIGHT

	runs = build_ingredient_runs(view, analysis)
	available = max(0.0, cursor - bottom)
	size, lines, clamped = fit_runs(runs, inner_width, available, ingredient_size, min_size)
	clamp_count += int(clamped)
	for line in lines:
		cursor -= size
		draw_runs(pdf, line, left, cursor, size)
		cursor -= size * (LINE_HEIGHT - 1.0)

	pdf.restoreState()
	return clamp_count


#============================================
def draw_empty_tile(pdf: reportlab.pdfgen.canvas.Canvas, config: SheetConfig) -> None:
	"""
	Draw the dashed placeholder for an unused slot.

	Args:
		pdf: ReportLab canvas sized to the label.
		config: Sheet configuration.
	"""
	width = mm_to_points(config.label_width)
	height = mm_to_points(config.label_height)
	red, green, blue = parse_hex_color(mls.config.EMPTY_SLOT_COLOR)
	pdf.saveState()
	pdf.setStrokeAlpha(0.3)
	pdf.setFillAlpha(0.3)
	pdf.setStrokeColorRGB(red, green, blue)
	pdf.setLineWidth(0.75)
	pdf.setDash(3, 2)
	pdf.rect(0.5, 0.5, width - 1.0, height - 1.0, stroke=1, fill=0)
	size = px_to_points(mls.config.EMPTY_SLOT_FONT_PX)
	draw_centered_line(pdf, EMPTY_SLOT_TEXT, width / 2.0, (height - size) / 2.0, size, False, "#999999")
	pdf.restoreState()


#============================================
def canvas_to_page(buffer: io.BytesIO) -> pypdf.PageObject:
	"""
	Read back the first page of a finished in-memory canvas.
	"""
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def build_label_tile(
	view: LabelView,
	config: SheetConfig,
	fallback_use_by: datetime.date | None = None,
	logo: reportlab.lib.utils.ImageReader | None = None,
) -> tuple[pypdf.PageObject, int]:
	"""
	Render a single label tile as a PDF page.

	Args:
		view: Label view.
		config: Sheet configuration.
		fallback_use_by: Date shown when the use-by is invalid.
		logo: Optional logo image.

	Returns:
		Tuple of (tile page, min_font_clamp_count).
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm_to_points(config.label_width), mm_to_points(config.label_height)),
	)
	clamp_count = draw_label_tile(pdf, view, config, fallback_use_by, logo)
	pdf.save()
	return (canvas_to_page(buffer), clamp_count)


#============================================
def build_empty_tile(config: SheetConfig) -> pypdf.PageObject:
	"""
	Render the empty slot placeholder as a PDF page.

	Args:
		config: Sheet configuration.

	Returns:
		Tile page.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm_to_points(config.label_width), mm_to_points(config.label_height)),
	)
	draw_empty_tile(pdf, config)
	pdf.save()
	return canvas_to_page(buffer)


#============================================
def draw_label_outlines(pdf: reportlab.pdfgen.canvas.Canvas, config: SheetConfig) -> None:
	"""
	Draw label outlines on the current page.

	Args:
		pdf: ReportLab canvas.
		config: Sheet configuration.
	"""
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
	for slot in range(config.labels_per_page):
		x0, y0, x1, y1 = mls.config.slot_box_points(config, slot)
		pdf.rect(x0, y0, x1 - x0, y1 - y0, stroke=1, fill=0)


#============================================
def draw_calibration_page(pdf: reportlab.pdfgen.canvas.Canvas, config: SheetConfig) -> None:
	"""
	Draw calibration boxes, center marks and a 10 mm ruler.

	Args:
		pdf: ReportLab canvas.
		config: Sheet configuration.
	"""
	page_height = mm_to_points(config.page_height)
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(0.6, 0.6, 0.6)
	for slot in range(config.labels_per_page):
		x0, y0, x1, y1 = mls.config.slot_box_points(config, slot)
		pdf.rect(x0, y0, x1 - x0, y1 - y0, stroke=1, fill=0)

	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	pdf.setLineWidth(0.6)
	last_row_slot = (config.rows - 1) * config.columns
	corner_slots = {0, config.columns - 1, last_row_slot, last_row_slot + config.columns - 1}
	for slot in sorted(corner_slots):
		x0, y0, x1, y1 = mls.config.slot_box_points(config, slot)
		center_x = (x0 + x1) / 2.0
		center_y = (y0 + y1) / 2.0
		size = 6.0
		pdf.line(center_x - size, center_y, center_x + size, center_y)
		pdf.line(center_x, center_y - size, center_x, center_y + size)

	ruler_x = mm_to_points(config.padding_horizontal)
	ruler_y = page_height - mm_to_points(config.padding_vertical) / 2.0
	pdf.line(ruler_x, ruler_y, ruler_x + mm_to_points(CALIBRATION_RULER_MM), ruler_y)
	pdf.setFont(DEFAULT_FONT_REGULAR, 8)
	pdf.drawString(ruler_x, ruler_y + 4.0, f"{CALIBRATION_RULER_MM:g} mm")
	pdf.drawString(
		ruler_x + mm_to_points(CALIBRATION_RULER_MM) + 10.0,
		ruler_y + 4.0,
		"Print at 100% scale, no margins",
	)


#============================================
def build_page_overlay(config: SheetConfig, draw: typing.Callable) -> pypdf.PageObject:
	"""
	Build a full-page PDF page from a canvas drawing function.

	Args:
		config: Sheet configuration.
		draw: Callable taking (canvas, config).

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm_to_points(config.page_width), mm_to_points(config.page_height)),
	)
	draw(pdf, config)
	pdf.save()
	return canvas_to_page(buffer)


#============================================
def build_outline_overlay(config: SheetConfig) -> pypdf.PageObject:
	"""
	Build a PDF overlay page with label outlines.
	"""
	return build_page_overlay(config, draw_label_outlines)


#============================================
def build_calibration_page(config: SheetConfig) -> pypdf.PageObject:
	"""
	Build a calibration page PDF.
	"""
	return build_page_overlay(config, draw_calibration_page)


#============================================
def impose_pages(
	pages: list[Page],
	config: SheetConfig,
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	show_progress: bool = False,
) -> tuple[pypdf.PdfWriter, int]:
	"""
	Impose label tiles onto A4 pages.

	Args:
		pages: Pages from paginate.
		config: Sheet configuration.
		use_by_date: Batch use-by date.
		today: Batch date, used for the default use-by fallback.
		show_progress: Print a progress bar.

	Returns:
		Tuple of (writer, min_font_clamp_count).
	"""
	writer = pypdf.PdfWriter()
	page_width = mm_to_points(config.page_width)
	page_height = mm_to_points(config.page_height)
	fallback = mls.config.default_use_by_date(today)

	logo = None
	if config.logo_path:
		logo = reportlab.lib.utils.ImageReader(load_logo_image(pathlib.Path(config.logo_path)))

	outline_page = None
	if config.draw_outlines:
		outline_page = build_outline_overlay(config)
	if config.calibration:
		writer.add_page(build_calibration_page(config))

	empty_tile = None
	if config.draw_empty_slots:
		empty_tile = build_empty_tile(config)

	clamp_count = 0
	tile_cache: dict[int, pypdf.PageObject] = {}
	for page_index, page in enumerate(pages):
		writer.add_page(pypdf.PageObject.create_blank_page(width=page_width, height=page_height))
		sheet = writer.pages[-1]
		if outline_page is not None:
			sheet.merge_page(outline_page)
		for slot, unit in enumerate(page.slots):
			if unit is None:
				tile_page = empty_tile
			else:
				key = id(unit.record)
				if key not in tile_cache:
					view = mls.records.view_from_record(unit.record, use_by_date)
					tile_cache[key], clamps = build_label_tile(view, config, fallback, logo)
					clamp_count += clamps
				tile_page = tile_cache[key]
			if tile_page is None:
				continue
			x0, y0, _x1, _y1 = mls.config.slot_box_points(config, slot)
			sheet.merge_transformed_page(tile_page, pypdf.Transformation().translate(x0, y0))
		if show_progress and ((page_index + 1) % PROGRESS_UPDATE_EVERY == 0 or page_index + 1 == len(pages)):
			print_progress("Imposing pages", page_index + 1, len(pages))
	if show_progress and pages:
		print("")
	return (writer, clamp_count)


#============================================
def write_labels_pdf(
	records: list[ProductionRecord],
	output: pathlib.Path | typing.BinaryIO,
	config: SheetConfig,
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	show_progress: bool = False,
) -> SheetResult:
	"""
	Render production records to an A4 label sheet PDF.

	Nothing is written when there are no labels and no calibration page.

	Args:
		records: Production records.
		output: Output PDF path or binary stream.
		config: Sheet configuration.
		use_by_date: Batch use-by date.
		today: Batch date.
		show_progress: Print a progress bar.

	Returns:
		SheetResult.
	"""
	pages, result = mls.paginate.plan_sheets(records, config)
	page_count = result.pages
	if config.calibration:
		page_count += 1
	if page_count == 0:
		return result

	writer, clamp_count = impose_pages(pages, config, use_by_date, today, show_progress)
	if isinstance(output, pathlib.Path):
		writer.write(str(output))
	else:
		writer.write(output)
	return dataclasses.replace(result, pages=page_count, text_clamps=clamp_count)


#============================================
def build_labels_pdf(
	records: list[ProductionRecord],
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	config: SheetConfig | None = None,
) -> tuple[bytes, SheetResult]:
	"""
	Render production records to PDF bytes.

	Args:
		records: Production records.
		use_by_date: Batch use-by date.
		today: Batch date.
		config: Sheet configuration (standard A4 sheet when None).

	Returns:
		Tuple of (pdf bytes, SheetResult); bytes are empty when no page was made.
	"""
	if config is None:
		config = mls.config.build_default_config()
	buffer = io.BytesIO()
	result = write_labels_pdf(records, buffer, config, use_by_date, today)
	return (buffer.getvalue(), result)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	input_path: pathlib.Path,
	records: list[ProductionRecord],
	use_by_text: str,
	result: SheetResult,
	config: SheetConfig,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		input_path: Production input file.
		records: Production records.
		use_by_text: Use-by date as printed.
		result: Sheet result.
		config: Sheet configuration.
	"""
	data = {
		"input": str(input_path),
		"use_by_date": use_by_text,
		"label_counts": mls.paginate.label_counts(records),
		"labels_per_page": result.labels_per_page,
		"total_labels": result.total_labels,
		"printed_labels": result.printed_labels,
		"leftover_labels": result.leftover_labels,
		"empty_slots": result.empty_slots,
		"text_clamps": result.text_clamps,
		"pages": result.pages,
		"layout": {
			"page_width_mm": config.page_width,
			"page_height_mm": config.page_height,
			"label_width_mm": config.label_width,
			"label_height_mm": config.label_height,
			"columns": config.columns,
			"rows": config.rows,
			"padding_vertical_mm": config.padding_vertical,
			"padding_horizontal_mm": config.padding_horizontal,
			"row_gap_mm": config.row_gap,
			"column_gap_mm": config.column_gap,
			"draw_outlines": config.draw_outlines,
			"calibration": config.calibration,
			"draw_empty_slots": config.draw_empty_slots,
			"max_pages": config.max_pages,
		},
		"fonts": {
			"regular": DEFAULT_FONT_REGULAR,
			"bold": DEFAULT_FONT_BOLD,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
