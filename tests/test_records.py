import datetime
import json
import pathlib

import pytest

import meal_label_sheets.records as records


#============================================
def test_parse_record_camel_and_snake_case() -> None:
	"""
	camelCase and snake_case payloads parse to the same record.
	"""
	camel = records.parse_record({
		"mealId": "m1",
		"mealName": "Chicken Tikka",
		"quantity": 3,
		"totalCalories": 520,
		"totalProtein": "41",
		"totalFat": 12.5,
		"totalCarbs": 48,
		"ingredients": "Chicken, Rice",
		"allergens": "Milk",
	})
	snake = records.parse_record({
		"meal_id": "m1",
		"meal_name": "Chicken Tikka",
		"quantity": "3",
		"total_calories": "520",
		"total_protein": 41,
		"total_fat": "12.5",
		"total_carbs": 48.0,
		"ingredients": "Chicken, Rice",
		"allergens": "Milk",
	})
	assert camel == snake
	assert camel.total_protein == 41
	assert isinstance(camel.total_carbs, int)
	assert camel.total_fat == 12.5


#============================================
def test_parse_record_defaults() -> None:
	"""
	Only the meal name is required; the id falls back to the name.
	"""
	record = records.parse_record({"mealName": "Plain Rice"})
	assert record.meal_id == "Plain Rice"
	assert record.quantity == 0
	assert record.total_calories == 0
	assert record.ingredients == ""
	assert record.storage_instructions is None


#============================================
def test_legacy_storage_keys() -> None:
	"""
	The consolidated and legacy storage fields are accepted in priority order.
	"""
	legacy = records.parse_record({
		"mealName": "Stew",
		"storage_heating_instructions": "Keep cold",
	})
	assert legacy.storage_instructions == "Keep cold"
	both = records.parse_record({
		"mealName": "Stew",
		"storageInstructions": "  ",
		"storageHeatingInstructions": "Freeze on arrival",
		"storage_heating_instructions": "Keep cold",
		"heating_instructions": "Oven 20 mins",
	})
	assert both.storage_instructions == "Freeze on arrival"
	assert both.heating_instructions == "Oven 20 mins"


#============================================
def test_parse_record_errors_name_the_record() -> None:
	"""
	Bad values raise ValueError naming the record.
	"""
	with pytest.raises(ValueError, match="Record 2"):
		records.parse_records([{"mealName": "A"}, {"quantity": 1}])
	with pytest.raises(ValueError, match="Stew"):
		records.parse_record({"mealName": "Stew", "totalFat": "lots"})
	with pytest.raises(ValueError):
		records.parse_record({"mealName": "Stew", "quantity": -2})
	with pytest.raises(ValueError):
		records.parse_record({"mealName": "Stew", "quantity": 1.5})
	with pytest.raises(ValueError):
		records.parse_record({"mealName": "Stew", "totalCalories": True})
	with pytest.raises(ValueError):
		records.parse_records({"mealName": "Stew"})


#============================================
def test_format_use_by_date() -> None:
	"""
	Valid dates format as "Ddd, DD/MM/YYYY"; bad dates use the fallback.
	"""
	assert records.format_use_by_date("2025-09-19") == "Fri, 19/09/2025"
	assert records.format_use_by_date(datetime.date(2025, 9, 22)) == "Mon, 22/09/2025"
	assert records.format_use_by_date("2025-09-19T08:00:00Z") == "Fri, 19/09/2025"
	fallback = datetime.date(2025, 9, 20)
	assert records.format_use_by_date("", fallback) == "Sat, 20/09/2025"
	assert records.format_use_by_date("not a date", fallback) == "Sat, 20/09/2025"
	assert records.format_use_by_date("2025-02-30", fallback) == "Sat, 20/09/2025"
	assert records.format_use_by_date("2025-09-19 08:00", fallback) == "Fri, 19/09/2025"
	assert records.format_use_by_date("2025-09-19garbage", fallback) == "Sat, 20/09/2025"
	assert records.format_use_by_date(None) == "Fri, 19/09/2025"
	assert "Invalid" not in records.format_use_by_date("garbage")


#============================================
def test_normalize_nested_data_wins() -> None:
	"""
	A nested "data" mapping takes precedence over flat fields.
	"""
	view = records.normalize_label_input({
		"mealName": "Flat Name",
		"calories": 100,
		"data": {"mealName": "Nested Name", "calories": 450, "useByDate": "2025-09-19"},
	})
	assert view.meal_name == "Nested Name"
	assert view.calories == 450
	assert view.use_by_date == "2025-09-19"
	assert view.protein == 0


#============================================
def test_normalize_flat_fields() -> None:
	"""
	Flat fields are read when no nested data is supplied.
	"""
	view = records.normalize_label_input({
		"meal_name": "Beef Chilli",
		"calories": "610",
		"protein": 45,
		"ingredients": "Beef, Beans",
		"heatingInstructions": "Hob 5 mins",
	})
	assert view.meal_name == "Beef Chilli"
	assert view.calories == 610
	assert view.protein == 45
	assert view.ingredients == "Beef, Beans"
	assert view.allergens == ""
	assert view.heating_instructions == "Hob 5 mins"
	assert view.storage_instructions is None


#============================================
def test_view_from_record() -> None:
	"""
	Record totals map onto the label view with the batch use-by.
	"""
	record = records.ProductionRecord(
		meal_id="m1", meal_name="Stew", quantity=2, total_calories=400, total_fat=9,
	)
	view = records.view_from_record(record, datetime.date(2025, 9, 19))
	assert view.meal_name == "Stew"
	assert view.calories == 400
	assert view.fat == 9
	assert view.use_by_date == "2025-09-19"


#============================================
def _meals() -> list[dict]:
	"""
	Build meal rows in the joined database shape.
	"""
	return [
		{
			"id": "m1",
			"name": "Chicken Tikka",
			"total_calories": 519.5,
			"total_protein": 40.4,
			"total_fat": 12.5,
			"total_carbs": 47.6,
			"meal_ingredients": [
				{"ingredients": {"name": "Chicken"}},
				{"ingredients": {"name": "Yoghurt"}},
			],
			"meal_allergens": [{"allergens": {"name": "Milk"}}],
		},
		{
			"id": "m2",
			"name": "Beef Chilli",
			"total_calories": 610,
			"ingredients": ["Beef", "Beans"],
			"allergens": [],
			"storage_heating_instructions": "Freeze on arrival",
		},
	]


#============================================
def test_aggregate_production() -> None:
	"""
	Quantities sum across regular and package orders, sorted largest first.
	"""
	orders = [
		{"status": "confirmed", "order_items": [{"meal_id": "m1", "quantity": 2}, {"meal_id": "m2", "quantity": 1}]},
		{"status": "pending", "order_items": [{"meal_id": "m2", "quantity": 50}]},
		{"status": "confirmed", "order_items": [{"meal_id": "unknown", "quantity": 9}]},
	]
	package_orders = [
		{"status": "confirmed", "package_meal_selections": [{"meal_id": "m2", "quantity": 4}]},
	]
	result = records.aggregate_production(orders, package_orders, _meals())
	assert [record.meal_id for record in result] == ["m2", "m1"]
	chilli, tikka = result
	assert chilli.quantity == 5
	assert chilli.order_count == 2
	assert chilli.ingredients == "Beef, Beans"
	assert chilli.allergens == ""
	assert chilli.storage_instructions == "Freeze on arrival"
	assert tikka.quantity == 2
	assert tikka.order_count == 1
	assert tikka.total_calories == 520
	assert tikka.total_protein == 40
	assert tikka.total_fat == 13
	assert tikka.total_carbs == 48
	assert tikka.ingredients == "Chicken, Yoghurt"
	assert tikka.allergens == "Milk"


#============================================
def test_load_production_input_shapes(tmp_path: pathlib.Path) -> None:
	"""
	JSON lists, mealProduction objects and CSV files all load.
	"""
	list_path = tmp_path / "list.json"
	list_path.write_text(json.dumps([{"mealName": "A", "quantity": 2}]), encoding="utf-8")
	loaded, use_by = records.load_production_input(list_path)
	assert [record.meal_name for record in loaded] == ["A"]
	assert use_by is None

	object_path = tmp_path / "object.json"
	object_path.write_text(
		json.dumps({"mealProduction": [{"mealName": "B", "quantity": 1}], "useByDate": "2025-09-19"}),
		encoding="utf-8",
	)
	loaded, use_by = records.load_production_input(object_path)
	assert loaded[0].meal_name == "B"
	assert use_by == "2025-09-19"

	orders_path = tmp_path / "orders.json"
	orders_path.write_text(
		json.dumps({
			"orders": [{"status": "confirmed", "order_items": [{"meal_id": "m1", "quantity": 3}]}],
			"meals": _meals(),
		}),
		encoding="utf-8",
	)
	loaded, _use_by = records.load_production_input(orders_path)
	assert loaded[0].meal_name == "Chicken Tikka"
	assert loaded[0].quantity == 3

	csv_path = tmp_path / "production.csv"
	csv_path.write_text(
		"mealName,quantity,totalCalories,ingredients,allergens\n"
		"Stew,4,380,\"Beef, Carrot\",Celery\n",
		encoding="utf-8",
	)
	loaded, _use_by = records.load_production_input(csv_path)
	assert loaded[0].quantity == 4
	assert loaded[0].ingredients == "Beef, Carrot"


#============================================
def test_load_production_input_errors(tmp_path: pathlib.Path) -> None:
	"""
	Missing files and unknown shapes fail fast.
	"""
	with pytest.raises(FileNotFoundError):
		records.load_production_input(tmp_path / "missing.json")
	bad_path = tmp_path / "bad.json"
	bad_path.write_text(json.dumps({"something": []}), encoding="utf-8")
	with pytest.raises(ValueError):
		records.load_production_input(bad_path)


#============================================
def test_normalize_empty_nested_data_still_wins() -> None:
	"""
	A supplied "data" object is used even when it is empty.
	"""
	view = records.normalize_label_input({"data": {}, "mealName": "Flat"})
	assert view.meal_name == ""
	assert view.calories == 0
	view = records.normalize_label_input({"data": None, "mealName": "Flat"})
	assert view.meal_name == "Flat"


#============================================
def test_aggregate_production_day_and_active_meals() -> None:
	"""
	Orders outside the production day and inactive meals are left out.
	"""
	meals = _meals()
	meals[0]["is_active"] = False
	orders = [
		{"status": "confirmed", "created_at": "2025-09-14T09:30:00Z", "order_items": [{"meal_id": "m2", "quantity": 3}]},
		{"status": "confirmed", "created_at": "2025-09-13T23:59:00Z", "order_items": [{"meal_id": "m2", "quantity": 7}]},
		{"status": "confirmed", "created_at": "2025-09-14T10:00:00Z", "order_items": [{"meal_id": "m1", "quantity": 2}]},
	]
	result = records.aggregate_production(orders, [], meals, production_date=datetime.date(2025, 9, 14))
	assert [(record.meal_id, record.quantity) for record in result] == [("m2", 3)]
	result = records.aggregate_production(orders, [], meals)
	assert [(record.meal_id, record.quantity) for record in result] == [("m2", 10)]


#============================================
def test_load_production_input_production_date(tmp_path: pathlib.Path) -> None:
	"""
	A "productionDate" in the input file limits aggregation to that day.
	"""
	path = tmp_path / "orders.json"
	payload = {
		"productionDate": "2025-09-14",
		"orders": [
			{"status": "confirmed", "created_at": "2025-09-14T08:00:00", "order_items": [{"meal_id": "m2", "quantity": 4}]},
			{"status": "confirmed", "created_at": "2025-09-15T08:00:00", "order_items": [{"meal_id": "m2", "quantity": 9}]},
		],
		"meals": _meals(),
	}
	path.write_text(json.dumps(payload), encoding="utf-8")
	loaded, use_by = records.load_production_input(path)
	assert [(record.meal_id, record.quantity) for record in loaded] == [("m2", 4)]
	assert use_by is None
