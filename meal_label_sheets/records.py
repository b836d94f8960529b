"""
Production record parsing, label input normalization and use-by dates.
"""

# Standard Library
import csv
import dataclasses
import datetime
import json
import math
import pathlib
import typing

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config


USE_BY_INPUT_FORMAT = mls.config.USE_BY_INPUT_FORMAT
USE_BY_DISPLAY_FORMAT = mls.config.USE_BY_DISPLAY_FORMAT
FALLBACK_USE_BY_TEXT = mls.config.FALLBACK_USE_BY_TEXT

MEAL_ID_KEYS = ("mealId", "meal_id", "id")
MEAL_NAME_KEYS = ("mealName", "meal_name", "name")
QUANTITY_KEYS = ("quantity",)
CALORIES_KEYS = ("totalCalories", "total_calories", "calories")
PROTEIN_KEYS = ("totalProtein", "total_protein", "protein")
FAT_KEYS = ("totalFat", "total_fat", "fat")
CARBS_KEYS = ("totalCarbs", "total_carbs", "carbs")
INGREDIENTS_KEYS = ("ingredients",)
ALLERGENS_KEYS = ("allergens",)
ORDER_COUNT_KEYS = ("orderCount", "order_count")
USE_BY_KEYS = ("useByDate", "use_by_date")
PRODUCTION_DATE_KEYS = ("productionDate", "production_date")
# canonical name first, then the consolidated field, then legacy names
STORAGE_KEYS = (
	"storageInstructions",
	"storage_instructions",
	"storageHeatingInstructions",
	"storage_heating_instructions",
)
HEATING_KEYS = ("heatingInstructions", "heating_instructions")


@dataclasses.dataclass
class ProductionRecord:
	meal_id: str
	meal_name: str
	quantity: int
	total_calories: float = 0
	total_protein: float = 0
	total_fat: float = 0
	total_carbs: float = 0
	ingredients: str = ""
	allergens: str = ""
	storage_instructions: str | None = None
	heating_instructions: str | None = None
	order_count: int = 0


@dataclasses.dataclass
class LabelView:
	meal_name: str
	calories: float = 0
	protein: float = 0
	fat: float = 0
	carbs: float = 0
	ingredients: str = ""
	allergens: str = ""
	use_by_date: str = ""
	storage_instructions: str | None = None
	heating_instructions: str | None = None


#============================================
def first_value(payload: typing.Mapping, keys: tuple[str, ...]) -> typing.Any:
	"""
	Return the first value present (not None) under any of the keys.

	Args:
		payload: Input mapping.
		keys: Candidate keys in priority order.

	Returns:
		Value or None.
	"""
	for key in keys:
		value = payload.get(key)
		if value is not None:
			return value
	return None


#============================================
def first_text(payload: typing.Mapping, keys: tuple[str, ...]) -> str | None:
	"""
	Return the first non-blank string under any of the keys.

	Args:
		payload: Input mapping.
		keys: Candidate keys in priority order.

	Returns:
		Stripped string or None.
	"""
	for key in keys:
		value = payload.get(key)
		if value is None:
			continue
		text = str(value).strip()
		if text:
			return text
	return None


#============================================
def parse_number(value: typing.Any, field_name: str) -> float | int:
	"""
	Parse a nutrition value.

	Args:
		value: Raw value (number, numeric string, empty or None).
		field_name: Field name for error messages.

	Returns:
		int when the value is integral, otherwise float.
	"""
	if value is None or value == "":
		return 0
	if isinstance(value, bool):
		raise ValueError(f"{field_name} must be a number, got {value!r}")
	if isinstance(value, (int, float)):
		number = float(value)
	else:
		try:
			number = float(str(value).strip())
		except ValueError:
			raise ValueError(f"{field_name} must be a number, got {value!r}") from None
	if math.isnan(number) or math.isinf(number):
		raise ValueError(f"{field_name} must be finite, got {value!r}")
	if number < 0:
		raise ValueError(f"{field_name} must be non-negative, got {value!r}")
	if number.is_integer():
		return int(number)
	return number


#============================================
def parse_quantity(value: typing.Any) -> int:
	"""
	Parse a label quantity.

	Args:
		value: Raw quantity.

	Returns:
		Non-negative integer.
	"""
	if value is None or value == "":
		return 0
	number = parse_number(value, "quantity")
	if not isinstance(number, int):
		raise ValueError(f"quantity must be a whole number, got {value!r}")
	return number


#============================================
def format_amount(value: float) -> str:
	"""
	Format a nutrition amount as shown on a label, e.g. 28 -> "28", 12.5 -> "12.5".

	Args:
		value: Numeric amount.

	Returns:
		Display string.
	"""
	if float(value).is_integer():
		return str(int(value))
	return f"{value:g}"


#============================================
def parse_record(payload: typing.Mapping, index: int = 0) -> ProductionRecord:
	"""
	Parse one production record from a JSON object or CSV row.

	Accepts camelCase and snake_case keys, plus the legacy storage
	instruction field names.

	Args:
		payload: Input mapping.
		index: Position in the input, for error messages.

	Returns:
		ProductionRecord.
	"""
	if not isinstance(payload, typing.Mapping):
		raise ValueError(f"Record {index + 1} must be an object, got {type(payload).__name__}")
	meal_name = first_text(payload, MEAL_NAME_KEYS)
	if meal_name is None:
		raise ValueError(f"Record {index + 1} has no meal name")
	meal_id = first_text(payload, MEAL_ID_KEYS) or meal_name
	try:
		record = ProductionRecord(
			meal_id=meal_id,
			meal_name=meal_name,
			quantity=parse_quantity(first_value(payload, QUANTITY_KEYS)),
			total_calories=parse_number(first_value(payload, CALORIES_KEYS), "totalCalories"),
			total_protein=parse_number(first_value(payload, PROTEIN_KEYS), "totalProtein"),
			total_fat=parse_number(first_value(payload, FAT_KEYS), "totalFat"),
			total_carbs=parse_number(first_value(payload, CARBS_KEYS), "totalCarbs"),
			ingredients=first_text(payload, INGREDIENTS_KEYS) or "",
			allergens=first_text(payload, ALLERGENS_KEYS) or "",
			storage_instructions=first_text(payload, STORAGE_KEYS),
			heating_instructions=first_text(payload, HEATING_KEYS),
			order_count=parse_quantity(first_value(payload, ORDER_COUNT_KEYS)),
		)
	except ValueError as error:
		raise ValueError(f"Record {index + 1} ({meal_name}): {error}") from None
	return record


#============================================
def parse_records(items: typing.Iterable[typing.Mapping]) -> list[ProductionRecord]:
	"""
	Parse a sequence of production records, keeping input order.

	Args:
		items: Input mappings.

	Returns:
		List of ProductionRecord.
	"""
	if isinstance(items, (str, bytes, typing.Mapping)):
		raise ValueError("Production records must be a list")
	return [parse_record(item, index) for index, item in enumerate(items)]


#============================================
def load_records_csv(path: pathlib.Path) -> list[ProductionRecord]:
	"""
	Load production records from a CSV file with a header row.

	Args:
		path: CSV path.

	Returns:
		List of ProductionRecord.
	"""
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		reader = csv.DictReader(handle)
		rows = [row for row in reader]
	return parse_records(rows)


#============================================
def load_production_input(path: pathlib.Path) -> tuple[list[ProductionRecord], str | None]:
	"""
	Load production records from a JSON or CSV file.

	JSON may be a list of records, an object with "mealProduction" (and
	optionally "useByDate"), or an object with "orders" and "meals" which
	is aggregated into records, limited to orders placed on "productionDate"
	when given.

	Args:
		path: Input path.

	Returns:
		Tuple of (records, use-by date string from the file or None).
	"""
	if not path.exists():
		raise FileNotFoundError(f"Input not found: {path}")
	if path.suffix.lower() == ".csv":
		return (load_records_csv(path), None)

	with path.open("r", encoding="utf-8") as handle:
		data = json.load(handle)
	if isinstance(data, list):
		return (parse_records(data), None)
	if not isinstance(data, dict):
		raise ValueError(f"Unsupported JSON input in {path}")
	use_by = first_text(data, USE_BY_KEYS)
	if "mealProduction" in data:
		return (parse_records(data["mealProduction"]), use_by)
	if "meals" in data:
		records = aggregate_production(
			data.get("orders", []),
			data.get("packageOrders", data.get("package_orders", [])),
			data["meals"],
			production_date=parse_use_by_date(first_text(data, PRODUCTION_DATE_KEYS)),
		)
		return (records, use_by)
	raise ValueError(f"JSON input in {path} needs a list, \"mealProduction\" or \"meals\"")


#============================================
def parse_use_by_date(value: typing.Any) -> datetime.date | None:
	"""
	Parse a use-by (or any ISO) date.

	Args:
		value: date, datetime or "YYYY-MM-DD" string (a longer ISO
			timestamp is cut to its date part).

	Returns:
		Parsed date, or None when missing or invalid.
	"""
	if not value:
		return None
	if isinstance(value, datetime.datetime):
		return value.date()
	if isinstance(value, datetime.date):
		return value
	text = str(value).strip()
	# only an ISO timestamp ("T" or space after the date) is cut to its date
	if len(text) > 10 and text[10] in ("T", " "):
		text = text[:10]
	try:
		return datetime.datetime.strptime(text, USE_BY_INPUT_FORMAT).date()
	except ValueError:
		return None


#============================================
def format_use_by_date(value: typing.Any, fallback: datetime.date | None = None) -> str:
	"""
	Format a use-by date as "Ddd, DD/MM/YYYY".

	Args:
		value: Use-by value as accepted by parse_use_by_date.
		fallback: Date shown when value is missing or invalid.

	Returns:
		Display string.
	"""
	parsed = parse_use_by_date(value)
	if parsed is None:
		parsed = fallback
	if parsed is None:
		return FALLBACK_USE_BY_TEXT
	return parsed.strftime(USE_BY_DISPLAY_FORMAT)


#============================================
def _view_from_mapping(payload: typing.Mapping) -> LabelView:
	"""
	Build a LabelView from one flat mapping of label fields.
	"""
	use_by = first_value(payload, USE_BY_KEYS)
	if isinstance(use_by, datetime.date):
		use_by = use_by.isoformat()
	return LabelView(
		meal_name=first_text(payload, MEAL_NAME_KEYS) or "",
		calories=parse_number(first_value(payload, CALORIES_KEYS), "calories"),
		protein=parse_number(first_value(payload, PROTEIN_KEYS), "protein"),
		fat=parse_number(first_value(payload, FAT_KEYS), "fat"),
		carbs=parse_number(first_value(payload, CARBS_KEYS), "carbs"),
		ingredients=first_text(payload, INGREDIENTS_KEYS) or "",
		allergens=first_text(payload, ALLERGENS_KEYS) or "",
		use_by_date=str(use_by or ""),
		storage_instructions=first_text(payload, STORAGE_KEYS),
		heating_instructions=first_text(payload, HEATING_KEYS),
	)


#============================================
def normalize_label_input(payload: typing.Mapping) -> LabelView:
	"""
	Normalize either label input shape into a LabelView.

	A nested "data" mapping wins, even an empty one; flat top-level fields
	are read only when "data" is missing or null.

	Args:
		payload: {"data": {...}} or flat label fields.

	Returns:
		LabelView.
	"""
	nested = payload.get("data")
	if nested is not None:
		if not isinstance(nested, typing.Mapping):
			raise ValueError("Label \"data\" must be an object")
		return _view_from_mapping(nested)
	return _view_from_mapping(payload)


#============================================
def view_from_record(record: ProductionRecord, use_by_date: typing.Any) -> LabelView:
	"""
	Build the label view for one copy of a production record.

	Args:
		record: Production record.
		use_by_date: Use-by date (date or string) shared by the batch.

	Returns:
		LabelView.
	"""
	if isinstance(use_by_date, datetime.date):
		use_by_date = use_by_date.isoformat()
	return LabelView(
		meal_name=record.meal_name,
		calories=record.total_calories,
		protein=record.total_protein,
		fat=record.total_fat,
		carbs=record.total_carbs,
		ingredients=record.ingredients,
		allergens=record.allergens,
		use_by_date=str(use_by_date or ""),
		storage_instructions=record.storage_instructions,
		heating_instructions=record.heating_instructions,
	)


#============================================
def _round_half_up(value: typing.Any) -> int:
	"""
	Round a nutrition total the way the storefront reports do.
	"""
	number = parse_number(value, "nutrition")
	return int(math.floor(number + 0.5))


#============================================
def _related_names(meal: typing.Mapping, link_key: str, target_key: str) -> str:
	"""
	Join ingredient or allergen names from a meal row.

	Accepts the joined-row shape ({"meal_ingredients": [{"ingredients":
	{"name": ...}}]}) or a plain list or string under target_key.
	"""
	links = meal.get(link_key)
	if links:
		names = []
		for link in links:
			target = link.get(target_key) or {}
			name = target.get("name") if isinstance(target, typing.Mapping) else target
			if name:
				names.append(str(name))
		return ", ".join(names)
	value = meal.get(target_key)
	if isinstance(value, (list, tuple)):
		return ", ".join(str(item) for item in value if item)
	return str(value or "")


#============================================
def aggregate_production(
	orders: typing.Iterable[typing.Mapping],
	package_orders: typing.Iterable[typing.Mapping],
	meals: typing.Iterable[typing.Mapping],
	statuses: tuple[str, ...] = ("confirmed",),
	production_date: datetime.date | None = None,
) -> list[ProductionRecord]:
	"""
	Sum ordered meals into production records.

	Regular orders carry "order_items" and package orders carry
	"package_meal_selections"; each line has "meal_id" and "quantity".
	Lines for unknown or inactive meals are skipped. Orders whose status is
	not in statuses are ignored; orders without a status are counted. With
	a production_date, only orders whose "created_at" falls on that day are
	counted.

	Args:
		orders: Regular order rows.
		package_orders: Package order rows.
		meals: Meal rows with nutrition, ingredients and allergens.
		statuses: Order statuses that require labels.
		production_date: Day the orders were placed, or None for all.

	Returns:
		Records sorted by quantity, largest first.
	"""
	meals_by_id: dict[str, typing.Mapping] = {}
	for meal in meals:
		if meal.get("is_active") is False:
			continue
		meals_by_id[str(meal.get("id"))] = meal

	production: dict[str, ProductionRecord] = {}
	sources = ((orders, "order_items"), (package_orders, "package_meal_selections"))
	for rows, lines_key in sources:
		for order in rows:
			status = order.get("status")
			if status is not None and status not in statuses:
				continue
			if production_date is not None:
				if parse_use_by_date(order.get("created_at")) != production_date:
					continue
			for line in order.get(lines_key) or []:
				meal_id = str(line.get("meal_id"))
				meal = meals_by_id.get(meal_id)
				if meal is None:
					continue
				quantity = parse_quantity(line.get("quantity"))
				existing = production.get(meal_id)
				if existing is not None:
					existing.quantity += quantity
					existing.order_count += 1
					continue
				production[meal_id] = ProductionRecord(
					meal_id=meal_id,
					meal_name=str(meal.get("name") or ""),
					quantity=quantity,
					total_calories=_round_half_up(meal.get("total_calories")),
					total_protein=_round_half_up(meal.get("total_protein")),
					total_fat=_round_half_up(meal.get("total_fat")),
					total_carbs=_round_half_up(meal.get("total_carbs")),
					ingredients=_related_names(meal, "meal_ingredients", "ingredients"),
					allergens=_related_names(meal, "meal_allergens", "allergens"),
					storage_instructions=first_text(meal, STORAGE_KEYS),
					heating_instructions=first_text(meal, HEATING_KEYS),
					order_count=1,
				)
	return sorted(production.values(), key=lambda record: record.quantity, reverse=True)
