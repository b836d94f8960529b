"""
Shared configuration and constants.

Every renderer (preview HTML, download HTML, PDF) reads its geometry from
this module so the three paths stay millimeter-identical.
"""

# Standard Library
import dataclasses
import datetime


POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4
POINTS_PER_MM = POINTS_PER_INCH / MM_PER_INCH
PX_TO_POINTS = 0.75

# A4 sheet of 96 x 50.8mm adhesive labels, 2 across x 5 down
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
COLUMNS = 2
ROWS = 5
LABELS_PER_PAGE = COLUMNS * ROWS

LABEL_WIDTH_MM = 96.0
LABEL_HEIGHT_MM = 50.8

PAGE_PADDING_VERTICAL_MM = 11.5
PAGE_PADDING_HORIZONTAL_MM = 6.5
ROW_GAP_MM = 5.0
COLUMN_GAP_MM = 5.0
LABEL_PADDING_MM = 2.0
LOGO_HEIGHT_MM = 5.0
GEOMETRY_TOLERANCE_MM = 0.01

USE_BY_OFFSET_DAYS = 5
USE_BY_INPUT_FORMAT = "%Y-%m-%d"
USE_BY_DISPLAY_FORMAT = "%a, %d/%m/%Y"
FALLBACK_USE_BY_TEXT = "Fri, 19/09/2025"

DEFAULT_STORAGE_INSTRUCTIONS = "Store refrigerated below 5°C"
DEFAULT_HEATING_INSTRUCTIONS = "Microwave 3-4 mins until piping hot"
NOT_SPECIFIED_TEXT = "Not specified"
EMPTY_SLOT_TEXT = "Empty"
TOKEN_SEPARATOR = ", "
INGREDIENT_BULLET = "• "
ALLERGEN_SEPARATOR = " • "
BOLD_MARKER = "**"

BRAND_NAME = "Fit Food Tasty"
BRAND_TAGLINE = "Healthy meals, freshly prepared"
WEBSITE_URL = "www.fitfoodtasty.co.uk"

BRAND_COLOR = "#22C55E"
TEXT_COLOR = "#0F172A"
MUTED_TEXT_COLOR = "#64748B"
USE_BY_BACKGROUND = "#E2E8F0"
LABEL_BORDER_COLOR = "#E2E8F0"
EMPTY_SLOT_COLOR = "#CCCCCC"

# font sizes in CSS px; the PDF path converts with PX_TO_POINTS
MEAL_NAME_FONT_PX = 12.0
BRAND_FONT_PX = 7.0
TAGLINE_FONT_PX = 5.0
NUTRITION_VALUE_FONT_PX = 8.0
NUTRITION_LABEL_FONT_PX = 5.0
USE_BY_FONT_PX = 7.0
INSTRUCTIONS_FONT_PX = 6.0
INGREDIENTS_FONT_PX = 6.0
FOOTER_FONT_PX = 5.5
EMPTY_SLOT_FONT_PX = 10.0
MIN_FONT_PX = 5.0
MAX_FONT_PX = 12.0
LINE_HEIGHT = 1.2

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

PRINT_INSTRUCTIONS = (
	"Use A4 paper (210mm × 297mm)",
	"Set printer to 100% scale (no fit to page)",
	"Disable margins or set to minimum",
	"Disable browser headers and footers",
	"Use portrait orientation",
	"For best results, use adhesive label sheets (96mm × 50.8mm, 2×5 layout)",
)

# overlays that must never reach paper
PRINT_HIDDEN_SELECTORS = (
	".no-print",
	".debug-banner",
	"[role=\"status\"]",
	"[role=\"alert\"]",
	"[data-sonner-toaster]",
)


@dataclasses.dataclass
class SheetConfig:
	page_width: float
	page_height: float
	label_width: float
	label_height: float
	columns: int
	rows: int
	padding_vertical: float
	padding_horizontal: float
	row_gap: float
	column_gap: float
	label_padding: float
	draw_outlines: bool
	calibration: bool
	draw_empty_slots: bool
	max_pages: int | None
	logo_path: str | None

	@property
	def labels_per_page(self) -> int:
		return self.columns * self.rows


@dataclasses.dataclass
class SheetResult:
	total_labels: int
	printed_labels: int
	leftover_labels: int
	pages: int
	labels_per_page: int
	empty_slots: int
	text_clamps: int = 0


#============================================
def build_default_config(**overrides) -> SheetConfig:
	"""
	Build the standard A4 2 x 5 sheet configuration.

	Args:
		**overrides: Field values replacing the defaults.

	Returns:
		SheetConfig.
	"""
	config = SheetConfig(
		page_width=PAGE_WIDTH_MM,
		page_height=PAGE_HEIGHT_MM,
		label_width=LABEL_WIDTH_MM,
		label_height=LABEL_HEIGHT_MM,
		columns=COLUMNS,
		rows=ROWS,
		padding_vertical=PAGE_PADDING_VERTICAL_MM,
		padding_horizontal=PAGE_PADDING_HORIZONTAL_MM,
		row_gap=ROW_GAP_MM,
		column_gap=COLUMN_GAP_MM,
		label_padding=LABEL_PADDING_MM,
		draw_outlines=False,
		calibration=False,
		draw_empty_slots=True,
		max_pages=None,
		logo_path=None,
	)
	if overrides:
		config = dataclasses.replace(config, **overrides)
	return config


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimeters to PDF points.

	Args:
		value: Millimeter value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_MM


#============================================
def format_mm(value: float) -> str:
	"""
	Format a millimeter value for CSS, e.g. 50.8 -> "50.8mm".

	Args:
		value: Millimeter value.

	Returns:
		CSS length string.
	"""
	return f"{value:g}mm"


#============================================
def default_use_by_date(today: datetime.date) -> datetime.date:
	"""
	Compute the default use-by date for a production batch.

	Args:
		today: Batch date supplied by the caller.

	Returns:
		today plus USE_BY_OFFSET_DAYS.
	"""
	return today + datetime.timedelta(days=USE_BY_OFFSET_DAYS)


#============================================
def sheet_extent_mm(config: SheetConfig) -> tuple[float, float]:
	"""
	Compute the width and height consumed by padding, labels and gaps.

	Args:
		config: Sheet configuration.

	Returns:
		Tuple of (width, height) in millimeters.
	"""
	width = (
		2.0 * config.padding_horizontal
		+ config.columns * config.label_width
		+ (config.columns - 1) * config.column_gap
	)
	height = (
		2.0 * config.padding_vertical
		+ config.rows * config.label_height
		+ (config.rows - 1) * config.row_gap
	)
	return (width, height)


#============================================
def validate_geometry(config: SheetConfig) -> None:
	"""
	Reject a configuration whose grid does not fit on the page.

	Args:
		config: Sheet configuration.
	"""
	if config.columns <= 0 or config.rows <= 0:
		raise ValueError("Grid needs at least one column and one row")
	width, height = sheet_extent_mm(config)
	if width > config.page_width + GEOMETRY_TOLERANCE_MM:
		raise ValueError(f"Label grid width {width:.2f}mm exceeds page width {config.page_width:g}mm")
	if height > config.page_height + GEOMETRY_TOLERANCE_MM:
		raise ValueError(f"Label grid height {height:.2f}mm exceeds page height {config.page_height:g}mm")


#============================================
def slot_row_col(config: SheetConfig, slot: int) -> tuple[int, int]:
	"""
	Map a slot index to its grid position.

	Slots fill row by row, the same order a CSS grid places children.

	Args:
		config: Sheet configuration.
		slot: Zero-based slot index within a page.

	Returns:
		Tuple of (row, col).
	"""
	if slot < 0 or slot >= config.labels_per_page:
		raise ValueError(f"Slot {slot} outside 0..{config.labels_per_page - 1}")
	return (slot // config.columns, slot % config.columns)


#============================================
def slot_origin_mm(config: SheetConfig, slot: int) -> tuple[float, float]:
	"""
	Compute the top-left corner of a slot, measured from the page's top-left.

	Args:
		config: Sheet configuration.
		slot: Zero-based slot index.

	Returns:
		Tuple of (x, y) in millimeters.
	"""
	row, col = slot_row_col(config, slot)
	x = config.padding_horizontal + col * (config.label_width + config.column_gap)
	y = config.padding_vertical + row * (config.label_height + config.row_gap)
	return (x, y)


#============================================
def slot_box_points(config: SheetConfig, slot: int) -> tuple[float, float, float, float]:
	"""
	Compute a slot's PDF bounding box (origin at the bottom-left).

	Args:
		config: Sheet configuration.
		slot: Zero-based slot index.

	Returns:
		Tuple of (x0, y0, x1, y1) in points.
	"""
	x_mm, y_mm = slot_origin_mm(config, slot)
	x0 = mm_to_points(x_mm)
	y1 = mm_to_points(config.page_height - y_mm)
	x1 = x0 + mm_to_points(config.label_width)
	y0 = y1 - mm_to_points(config.label_height)
	return (x0, y0, x1, y1)
