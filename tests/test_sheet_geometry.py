import datetime

import pytest

import meal_label_sheets.config as config_module


#============================================
def _boxes_intersect(
	first: tuple[float, float, float, float],
	second: tuple[float, float, float, float],
) -> bool:
	"""
	Check whether two boxes overlap by more than a touching edge.

	Args:
		first: Box (x0, y0, x1, y1).
		second: Box (x0, y0, x1, y1).

	Returns:
		True if the boxes overlap.
	"""
	return not (
		first[2] <= second[0]
		or second[2] <= first[0]
		or first[3] <= second[1]
		or second[3] <= first[1]
	)


#============================================
def test_sheet_arithmetic_fills_a4() -> None:
	"""
	Labels, gaps and padding add up to exactly 210 x 297mm.
	"""
	width = 2 * 96 + 5 + 2 * 6.5
	height = 5 * 50.8 + 4 * 5 + 2 * 11.5
	assert width == pytest.approx(210.0)
	assert height == pytest.approx(297.0)
	config = config_module.build_default_config()
	extent = config_module.sheet_extent_mm(config)
	assert extent[0] == pytest.approx(config.page_width)
	assert extent[1] == pytest.approx(config.page_height)
	config_module.validate_geometry(config)


#============================================
def test_default_layout_constants() -> None:
	"""
	The standard sheet is A4, 2 across by 5 down.
	"""
	config = config_module.build_default_config()
	assert (config.page_width, config.page_height) == (210.0, 297.0)
	assert (config.label_width, config.label_height) == (96.0, 50.8)
	assert (config.columns, config.rows) == (2, 5)
	assert config.labels_per_page == 10
	assert config_module.LABELS_PER_PAGE == 10


#============================================
def test_slot_order_is_row_major() -> None:
	"""
	Slots fill across each row first, the same way a CSS grid does.
	"""
	config = config_module.build_default_config()
	assert config_module.slot_row_col(config, 0) == (0, 0)
	assert config_module.slot_row_col(config, 1) == (0, 1)
	assert config_module.slot_row_col(config, 2) == (1, 0)
	assert config_module.slot_row_col(config, 9) == (4, 1)
	assert config_module.slot_origin_mm(config, 0) == (6.5, 11.5)
	x, y = config_module.slot_origin_mm(config, 3)
	assert x == pytest.approx(6.5 + 96 + 5)
	assert y == pytest.approx(11.5 + 50.8 + 5)
	with pytest.raises(ValueError):
		config_module.slot_row_col(config, 10)


#============================================
def test_slot_boxes_within_page() -> None:
	"""
	Every slot box lies inside the A4 page.
	"""
	config = config_module.build_default_config()
	page_width = config_module.mm_to_points(config.page_width)
	page_height = config_module.mm_to_points(config.page_height)
	for slot in range(config.labels_per_page):
		x0, y0, x1, y1 = config_module.slot_box_points(config, slot)
		assert x0 >= 0.0
		assert y0 >= 0.0
		assert x1 <= page_width + 1e-6
		assert y1 <= page_height + 1e-6
		assert x1 - x0 == pytest.approx(config_module.mm_to_points(96.0))
		assert y1 - y0 == pytest.approx(config_module.mm_to_points(50.8))


#============================================
def test_slot_boxes_do_not_overlap() -> None:
	"""
	No two slot boxes on a page overlap.
	"""
	config = config_module.build_default_config()
	boxes = [config_module.slot_box_points(config, slot) for slot in range(config.labels_per_page)]
	for index, first in enumerate(boxes):
		for second in boxes[index + 1:]:
			assert not _boxes_intersect(first, second)


#============================================
def test_first_slot_is_top_left_in_pdf_space() -> None:
	"""
	Slot 0 sits at the top-left, measured from the PDF bottom-left origin.
	"""
	config = config_module.build_default_config()
	x0, _y0, _x1, y1 = config_module.slot_box_points(config, 0)
	assert x0 == pytest.approx(config_module.mm_to_points(6.5))
	assert y1 == pytest.approx(config_module.mm_to_points(297.0 - 11.5))


#============================================
def test_oversized_grid_is_rejected() -> None:
	"""
	A grid that does not fit on the page raises ValueError.
	"""
	config = config_module.build_default_config(label_width=100.0)
	with pytest.raises(ValueError):
		config_module.validate_geometry(config)
	with pytest.raises(ValueError):
		config_module.validate_geometry(config_module.build_default_config(rows=0))


#============================================
def test_default_use_by_date_offset() -> None:
	"""
	The default use-by is five days after the supplied batch date.
	"""
	assert config_module.default_use_by_date(datetime.date(2025, 9, 14)) == datetime.date(2025, 9, 19)
