"""
HTML rendering for the on-screen preview and the downloadable label sheet.
"""

# Standard Library
import base64
import datetime
import html
import io

# PIP3 modules
import PIL.Image

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

format_mm = mls.config.format_mm

BRAND_NAME = mls.config.BRAND_NAME
BRAND_TAGLINE = mls.config.BRAND_TAGLINE
WEBSITE_URL = mls.config.WEBSITE_URL
EMPTY_SLOT_TEXT = mls.config.EMPTY_SLOT_TEXT
DEFAULT_STORAGE_INSTRUCTIONS = mls.config.DEFAULT_STORAGE_INSTRUCTIONS
DEFAULT_HEATING_INSTRUCTIONS = mls.config.DEFAULT_HEATING_INSTRUCTIONS
NOT_SPECIFIED_TEXT = mls.config.NOT_SPECIFIED_TEXT
PRINT_INSTRUCTIONS = mls.config.PRINT_INSTRUCTIONS
PRINT_HIDDEN_SELECTORS = mls.config.PRINT_HIDDEN_SELECTORS


#============================================
def build_sheet_css(config: SheetConfig) -> str:
	"""
	Build the page, label and print CSS shared by both HTML documents.

	Args:
		config: Sheet configuration.

	Returns:
		CSS text.
	"""
	label_width = format_mm(config.label_width)
	label_height = format_mm(config.label_height)
	hidden = ",\n\t".join(PRINT_HIDDEN_SELECTORS)
	return f"""
@page {{
	size: A4 portrait;
	margin: 0;
}}
* {{
	box-sizing: border-box;
}}
body {{
	margin: 0;
	padding: 0;
	font-family: Inter, Arial, sans-serif;
	color: {mls.config.TEXT_COLOR};
}}
.sheet-page {{
	width: {format_mm(config.page_width)};
	height: {format_mm(config.page_height)};
	padding: {format_mm(config.padding_vertical)} {format_mm(config.padding_horizontal)};
	display: grid;
	grid-template-columns: repeat({config.columns}, {label_width});
	grid-template-rows: repeat({config.rows}, {label_height});
	column-gap: {format_mm(config.column_gap)};
	row-gap: {format_mm(config.row_gap)};
	background: #ffffff;
	overflow: hidden;
}}
.page-break {{
	page-break-after: always;
	break-after: page;
}}
.label {{
	width: {label_width};
	height: {label_height};
	padding: {format_mm(config.label_padding)};
	position: relative;
	display: flex;
	flex-direction: column;
	overflow: hidden;
	background: #ffffff;
	border: 1px solid {mls.config.LABEL_BORDER_COLOR};
	line-height: {mls.config.LINE_HEIGHT};
}}
.label-header {{
	display: flex;
	flex-direction: column;
	align-items: center;
	text-align: center;
}}
.logo {{
	height: {format_mm(mls.config.LOGO_HEIGHT_MM)};
	width: auto;
}}
.brand {{
	font-weight: bold;
	color: {mls.config.BRAND_COLOR};
}}
.meal-name {{
	font-weight: 800;
	line-height: 1.05;
	overflow: hidden;
}}
.tagline {{
	color: {mls.config.MUTED_TEXT_COLOR};
}}
.nutrition-grid {{
	display: grid;
	grid-template-columns: repeat(2, 1fr);
	column-gap: 1mm;
	margin: 0.5mm 0;
	text-align: center;
}}
.nutrition-value {{
	font-weight: bold;
	color: {mls.config.BRAND_COLOR};
}}
.nutrition-label {{
	color: {mls.config.MUTED_TEXT_COLOR};
	text-transform: uppercase;
}}
.use-by {{
	background: {mls.config.USE_BY_BACKGROUND};
	border-radius: 0.8mm;
	padding: 0.3mm 1mm;
	font-weight: bold;
}}
.instructions {{
	color: {mls.config.MUTED_TEXT_COLOR};
	margin: 0.5mm 0;
}}
.ingredients {{
	flex: 1;
	overflow: hidden;
}}
.ingredient {{
	margin-right: 0.8mm;
}}
.allergen-match {{
	font-weight: bold;
}}
.section-title {{
	font-weight: 600;
}}
.allergens {{
	font-weight: bold;
}}
.footer {{
	margin-top: auto;
	text-align: center;
	font-weight: 500;
	color: {mls.config.BRAND_COLOR};
}}
.empty-label {{
	width: {label_width};
	height: {label_height};
	border: 1px dashed {mls.config.EMPTY_SLOT_COLOR};
	opacity: 0.3;
	display: flex;
	align-items: center;
	justify-content: center;
	color: #999999;
	font-size: {mls.config.EMPTY_SLOT_FONT_PX:g}px;
}}
.debug-banner {{
	position: absolute;
	top: 0;
	left: 0;
	background: rgba(239, 68, 68, 0.9);
	color: #ffffff;
	font-size: 6px;
	padding: 0.5mm;
}}
@media print {{
	body {{
		margin: 0 !important;
		padding: 0 !important;
		background: #ffffff !important;
	}}
	.sheet-page {{
		margin: 0 !important;
		box-shadow: none !important;
	}}
	{hidden} {{
		display: none !important;
	}}
}}
"""


#============================================
def build_screen_css() -> str:
	"""
	Build the preview-only CSS that stacks pages on screen.

	Returns:
		CSS text.
	"""
	return """
.print-preview {
	background: #f3f4f6;
	padding: 16px;
}
.print-preview .sheet-page {
	margin: 0 auto 20px auto;
	box-shadow: 0 0 10px rgba(0, 0, 0, 0.1);
}
.preview-summary, .print-instructions {
	max-width: 210mm;
	margin: 0 auto 16px auto;
	padding: 12px 16px;
	background: #ffffff;
	border: 1px solid #e5e7eb;
	border-radius: 6px;
	font-size: 13px;
}
.print-instructions {
	background: #fefce8;
	border-color: #fef08a;
}
.print-instructions ul {
	list-style: none;
	padding: 0;
}
@media print {
	.print-preview {
		margin: 0 !important;
		padding: 0 !important;
		background: #ffffff !important;
	}
}
"""


#============================================
def logo_data_uri(image: PIL.Image.Image) -> str:
	"""
	Encode a logo image as a PNG data URI so documents stay standalone.

	Args:
		image: Logo image.

	Returns:
		data:image/png;base64 URI.
	"""
	buffer = io.BytesIO()
	if image.mode not in ("RGB", "RGBA"):
		image = image.convert("RGBA")
	image.save(buffer, format="PNG")
	encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
	return f"data:image/png;base64,{encoded}"


#============================================
def render_ingredients_html(view: LabelView, analysis: "mls.content_fit.ContentAnalysis") -> str:
	"""
	Render the ingredient list with allergen matches in bold.

	Args:
		view: Label view.
		analysis: Content analysis for abbreviation.

	Returns:
		HTML fragment.
	"""
	formatted = mls.ingredients.format_ingredients(view.ingredients, view.allergens)
	if formatted == NOT_SPECIFIED_TEXT:
		return f'<span class="ingredient not-specified">{NOT_SPECIFIED_TEXT}</span>'
	spans: list[str] = []
	for line in formatted.split("\n"):
		parts: list[str] = []
		for text, bold in mls.ingredients.split_markup(line):
			text = html.escape(mls.content_fit.abbreviate_ingredient(text, analysis))
			if bold:
				parts.append(f'<strong class="allergen-match">{text}</strong>')
			else:
				parts.append(text)
		spans.append(f'<span class="ingredient">{"".join(parts)}</span>')
	return " ".join(spans)


#============================================
def render_label_html(
	view: LabelView,
	fallback_use_by: datetime.date | None = None,
	logo_uri: str | None = None,
	debug: bool = False,
) -> str:
	"""
	Render one 96 x 50.8mm label.

	Args:
		view: Label view.
		fallback_use_by: Date shown when the view's use-by is missing or invalid.
		logo_uri: Logo image URI; the brand name is shown when None.
		debug: Add a density banner (hidden in print).

	Returns:
		HTML fragment.
	"""
	analysis = mls.content_fit.analyze_content(view)
	sizes = mls.content_fit.font_sizes_for(analysis)
	use_by_text = mls.records.format_use_by_date(view.use_by_date, fallback_use_by)
	storage = view.storage_instructions or DEFAULT_STORAGE_INSTRUCTIONS
	heating = view.heating_instructions or DEFAULT_HEATING_INSTRUCTIONS
	escape = html.escape

	lines: list[str] = ['<div class="label">']
	if debug:
		lines.append(
			f'<div class="debug-banner" role="status">Density: {analysis.density}%'
			f' • {analysis.quality_mode} • {analysis.scaling.meal_name:.2f}x</div>'
		)
	lines.append('<div class="label-header">')
	if logo_uri:
		lines.append(f'<img class="logo" src="{escape(logo_uri)}" alt="{escape(BRAND_NAME)}">')
	else:
		lines.append(f'<div class="brand" style="font-size: {mls.config.BRAND_FONT_PX:g}px">{escape(BRAND_NAME)}</div>')
	lines.append(f'<div class="meal-name" style="font-size: {sizes.meal_name:g}px">{escape(view.meal_name)}</div>')
	lines.append(f'<div class="tagline" style="font-size: {mls.config.TAGLINE_FONT_PX:g}px">{escape(BRAND_TAGLINE)}</div>')
	lines.append("</div>")

	nutrition = (
		(mls.records.format_amount(view.calories), "KCAL"),
		(mls.records.format_amount(view.protein) + "g", "PROTEIN"),
		(mls.records.format_amount(view.fat) + "g", "FAT"),
		(mls.records.format_amount(view.carbs) + "g", "CARBS"),
	)
	lines.append(f'<div class="nutrition-grid" style="margin: {0.5 * analysis.scaling.spacing:.2f}mm 0">')
	for value, name in nutrition:
		lines.append(
			f'<div class="nutrition-item">'
			f'<span class="nutrition-value" style="font-size: {sizes.nutrition_value:g}px">{value}</span> '
			f'<span class="nutrition-label" style="font-size: {sizes.nutrition_label:g}px">{name}</span>'
			f"</div>"
		)
	lines.append("</div>")

	lines.append(f'<div class="use-by" style="font-size: {sizes.use_by:g}px">USE BY: {escape(use_by_text)}</div>')
	lines.append(f'<div class="instructions" style="font-size: {sizes.instructions:g}px">')
	lines.append(f'<div class="storage">{escape(storage)}</div>')
	lines.append(f'<div class="heating">{escape(heating)}</div>')
	lines.append("</div>")

	lines.append(
		f'<div class="ingredients" style="font-size: {sizes.ingredients:g}px">'
		f'<span class="section-title">Ingredients:</span> {render_ingredients_html(view, analysis)}</div>'
	)
	allergens = mls.ingredients.format_allergens(view.allergens)
	if allergens:
		lines.append(
			f'<div class="allergens" style="font-size: {sizes.ingredients:g}px">'
			f'<span class="section-title">Allergens:</span> <strong>{escape(allergens)}</strong></div>'
		)
	lines.append(f'<div class="footer" style="font-size: {sizes.footer:g}px">{escape(WEBSITE_URL)}</div>')
	lines.append("</div>")
	return "\n".join(lines)


#============================================
def render_empty_slot_html() -> str:
	"""
	Render the placeholder that keeps the grid full on the last page.

	Returns:
		HTML fragment.
	"""
	return f'<div class="empty-label">{EMPTY_SLOT_TEXT}</div>'


#============================================
def render_page_html(
	page: Page,
	use_by_date: datetime.date | str | None,
	fallback_use_by: datetime.date | None = None,
	logo_uri: str | None = None,
	debug: bool = False,
) -> str:
	"""
	Render one A4 page of labels.

	Args:
		page: Page from paginate.
		use_by_date: Use-by date for every label on the page.
		fallback_use_by: Date shown when use_by_date is invalid.
		logo_uri: Optional logo URI.
		debug: Add density banners.

	Returns:
		HTML fragment.
	"""
	classes = "sheet-page"
	if not page.is_last:
		classes += " page-break"
	lines = [f'<div class="{classes}" data-page="{page.number}">']
	views: dict[int, LabelView] = {}
	for slot in page.slots:
		if slot is None:
			lines.append(render_empty_slot_html())
			continue
		key = id(slot.record)
		if key not in views:
			views[key] = mls.records.view_from_record(slot.record, use_by_date)
		lines.append(render_label_html(views[key], fallback_use_by, logo_uri, debug))
	lines.append("</div>")
	return "\n".join(lines)


#============================================
def render_pages_html(
	records: list[ProductionRecord],
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	config: SheetConfig,
	logo_uri: str | None = None,
	debug: bool = False,
) -> tuple[SheetResult, list[str]]:
	"""
	Paginate records and render every page.

	Args:
		records: Production records.
		use_by_date: Batch use-by date.
		today: Batch date, used for the default use-by fallback.
		config: Sheet configuration.
		logo_uri: Optional logo URI.
		debug: Add density banners.

	Returns:
		Tuple of (SheetResult, page HTML fragments).
	"""
	fallback = mls.config.default_use_by_date(today)
	pages, result = mls.paginate.plan_sheets(records, config)
	fragments = [render_page_html(page, use_by_date, fallback, logo_uri, debug) for page in pages]
	return (result, fragments)


#============================================
def build_preview_document(
	records: list[ProductionRecord],
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	config: SheetConfig | None = None,
	logo_uri: str | None = None,
	debug: bool = False,
) -> str:
	"""
	Build the on-screen print preview.

	Args:
		records: Production records.
		use_by_date: Batch use-by date.
		today: Batch date.
		config: Sheet configuration (standard A4 sheet when None).
		logo_uri: Optional logo URI.
		debug: Add density banners.

	Returns:
		HTML document.
	"""
	if config is None:
		config = mls.config.build_default_config()
	result, fragments = render_pages_html(records, use_by_date, today, config, logo_uri, debug)
	instructions = "\n".join(f"<li>• {html.escape(item)}</li>" for item in PRINT_INSTRUCTIONS)
	body = [
		'<div class="print-preview">',
		'<div class="no-print preview-summary">',
		"<h3>Print Preview</h3>",
		"<p>This preview shows exactly how your labels will appear when printed on A4 paper.</p>",
		f"<p>Total Labels: {result.printed_labels} • Pages: {result.pages} • "
		f"Layout: {config.columns} across × {config.rows} down per page</p>",
		"</div>",
	]
	body.extend(fragments)
	body.extend([
		'<div class="no-print print-instructions">',
		"<h4>Printing Instructions:</h4>",
		f"<ul>\n{instructions}\n</ul>",
		"</div>",
		"</div>",
	])
	return wrap_document("Label Print Preview", build_sheet_css(config) + build_screen_css(), body)


#============================================
def build_labels_document(
	records: list[ProductionRecord],
	use_by_date: datetime.date | str | None,
	today: datetime.date,
	config: SheetConfig | None = None,
	logo_uri: str | None = None,
) -> str:
	"""
	Build the standalone label document served for download.

	All CSS is embedded and the logo (if any) should be a data URI, so the
	file prints without network access.

	Args:
		records: Production records.
		use_by_date: Batch use-by date.
		today: Generation date, shown in the title.
		config: Sheet configuration (standard A4 sheet when None).
		logo_uri: Optional logo URI.

	Returns:
		HTML document.
	"""
	if config is None:
		config = mls.config.build_default_config()
	_result, fragments = render_pages_html(records, use_by_date, today, config, logo_uri)
	title = f"Meal Labels - {today.strftime('%d/%m/%Y')}"
	return wrap_document(title, build_sheet_css(config), fragments)


#============================================
def wrap_document(title: str, css: str, body: list[str]) -> str:
	"""
	Wrap body fragments into a complete HTML document.

	Args:
		title: Document title.
		css: Embedded CSS.
		body: Body fragments.

	Returns:
		HTML document.
	"""
	lines = [
		"<!DOCTYPE html>",
		'<html lang="en-GB">',
		"<head>",
		'<meta charset="UTF-8">',
		f"<title>{html.escape(title)}</title>",
		f"<style>{css}</style>",
		"</head>",
		"<body>",
	]
	lines.extend(body)
	lines.extend(["</body>", "</html>", ""])
	return "\n".join(lines)


#============================================
def build_download_filename(today: datetime.date, extension: str = "html") -> str:
	"""
	Build the suggested download filename, e.g. "labels-2025-09-14.html".

	Args:
		today: Generation date.
		extension: File extension without the dot.

	Returns:
		Filename.
	"""
	return f"labels-{today.isoformat()}.{extension}"
