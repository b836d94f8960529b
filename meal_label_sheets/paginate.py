"""
Label expansion and pagination.
"""

# Standard Library
import dataclasses

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config
import meal_label_sheets.records


ProductionRecord = mls.records.ProductionRecord
SheetConfig = mls.config.SheetConfig
SheetResult = mls.config.SheetResult

LABELS_PER_PAGE = mls.config.LABELS_PER_PAGE


@dataclasses.dataclass(frozen=True)
class LabelUnit:
	record: ProductionRecord
	copy_index: int


@dataclasses.dataclass(frozen=True)
class Page:
	number: int
	total_pages: int
	slots: tuple[LabelUnit | None, ...]

	@property
	def filled_slots(self) -> int:
		return sum(1 for slot in self.slots if slot is not None)

	@property
	def empty_slots(self) -> int:
		return len(self.slots) - self.filled_slots

	@property
	def is_last(self) -> bool:
		return self.number == self.total_pages


#============================================
def check_labels_per_page(labels_per_page: int) -> None:
	"""
	Reject page sizes that cannot hold a label.

	Args:
		labels_per_page: Slots per page.
	"""
	if isinstance(labels_per_page, bool) or not isinstance(labels_per_page, int):
		raise ValueError(f"labels_per_page must be an integer, got {labels_per_page!r}")
	if labels_per_page <= 0:
		raise ValueError(f"labels_per_page must be positive, got {labels_per_page}")


#============================================
def expand_records(records: list[ProductionRecord]) -> list[LabelUnit]:
	"""
	Expand production records into one unit per physical label.

	Args:
		records: Production records in print order.

	Returns:
		Units in record order, then copy order.
	"""
	units: list[LabelUnit] = []
	for record in records:
		if record.quantity < 0:
			raise ValueError(f"Negative quantity for {record.meal_name}: {record.quantity}")
		for copy_index in range(1, record.quantity + 1):
			units.append(LabelUnit(record=record, copy_index=copy_index))
	return units


#============================================
def count_pages(total_labels: int, labels_per_page: int = LABELS_PER_PAGE) -> int:
	"""
	Count the pages needed for a number of labels.

	Args:
		total_labels: Number of labels.
		labels_per_page: Slots per page.

	Returns:
		Page count (0 for no labels).
	"""
	check_labels_per_page(labels_per_page)
	if total_labels <= 0:
		return 0
	return (total_labels + labels_per_page - 1) // labels_per_page


#============================================
def paginate_units(units: list[LabelUnit], labels_per_page: int = LABELS_PER_PAGE) -> list[Page]:
	"""
	Split label units into full pages, padding the last page with None.

	Args:
		units: Expanded label units.
		labels_per_page: Slots per page.

	Returns:
		Pages numbered from 1.
	"""
	total_pages = count_pages(len(units), labels_per_page)
	pages: list[Page] = []
	for page_index in range(total_pages):
		start = page_index * labels_per_page
		chunk: list[LabelUnit | None] = list(units[start:start + labels_per_page])
		chunk.extend([None] * (labels_per_page - len(chunk)))
		pages.append(Page(number=page_index + 1, total_pages=total_pages, slots=tuple(chunk)))
	return pages


#============================================
def paginate(records: list[ProductionRecord], labels_per_page: int = LABELS_PER_PAGE) -> list[Page]:
	"""
	Expand records and lay them out on pages.

	Args:
		records: Production records.
		labels_per_page: Slots per page.

	Returns:
		Pages; empty when no label is needed.
	"""
	check_labels_per_page(labels_per_page)
	return paginate_units(expand_records(records), labels_per_page)


#============================================
def label_counts(records: list[ProductionRecord]) -> dict[str, int]:
	"""
	Count labels per meal name.

	Args:
		records: Production records.

	Returns:
		Mapping of meal name to label count, in first-seen order.
	"""
	counts: dict[str, int] = {}
	for record in records:
		counts[record.meal_name] = counts.get(record.meal_name, 0) + record.quantity
	return counts


#============================================
def plan_sheets(records: list[ProductionRecord], config: SheetConfig) -> tuple[list[Page], SheetResult]:
	"""
	Paginate records for a sheet configuration, honoring max_pages.

	Args:
		records: Production records.
		config: Sheet configuration.

	Returns:
		Tuple of (pages to print, SheetResult counting label pages only).
	"""
	mls.config.validate_geometry(config)
	all_pages = paginate(records, config.labels_per_page)
	pages = all_pages
	if config.max_pages is not None:
		if config.max_pages < 0:
			raise ValueError(f"max_pages must be non-negative, got {config.max_pages}")
		pages = all_pages[:config.max_pages]
		# kept pages report the printed page count
		pages = [dataclasses.replace(page, total_pages=len(pages)) for page in pages]
	total_labels = sum(page.filled_slots for page in all_pages)
	printed_labels = sum(page.filled_slots for page in pages)
	result = SheetResult(
		total_labels=total_labels,
		printed_labels=printed_labels,
		leftover_labels=total_labels - printed_labels,
		pages=len(pages),
		labels_per_page=config.labels_per_page,
		empty_slots=sum(page.empty_slots for page in pages),
	)
	return (pages, result)
