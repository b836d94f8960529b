import meal_label_sheets.config
import meal_label_sheets.content_fit as content_fit
import meal_label_sheets.records


#============================================
def _view(meal_name: str = "Chicken Tikka", ingredients: str = "", allergens: str = "") -> meal_label_sheets.records.LabelView:
	"""
	Build a label view with the given text content.
	"""
	return meal_label_sheets.records.LabelView(meal_name=meal_name, ingredients=ingredients, allergens=allergens)


#============================================
def _long_ingredients(count: int) -> str:
	"""
	Build an ingredient list with count entries.
	"""
	return ", ".join(f"Modified Maize Starch Powder {index}" for index in range(count))


#============================================
def test_density_is_bounded() -> None:
	"""
	Density stays within 0..100 for sparse and extreme labels.
	"""
	sparse = content_fit.content_density(_view("Rice"))
	dense = content_fit.content_density(
		_view("Slow Cooked Beef Brisket With Roasted Root Vegetables", _long_ingredients(40), "Milk, Eggs, Soy, Celery, Mustard, Sesame, Gluten"),
	)
	assert 0 <= sparse <= 100
	assert dense == 100


#============================================
def test_density_grows_with_ingredients() -> None:
	"""
	Adding ingredients never lowers the density score.
	"""
	scores = [content_fit.content_density(_view(ingredients=_long_ingredients(count))) for count in range(0, 20, 2)]
	assert scores == sorted(scores)
	assert scores[-1] > scores[0]


#============================================
def test_quality_mode_thresholds() -> None:
	"""
	Quality modes switch at 85, 70, 55, 35 and 20.
	"""
	expected = {
		100: "emergency",
		85: "emergency",
		84: "compressed",
		70: "compressed",
		69: "optimized",
		55: "optimized",
		54: "optimal",
		35: "optimal",
		34: "enhanced",
		20: "enhanced",
		19: "premium",
		0: "premium",
	}
	for density, mode in expected.items():
		assert content_fit.quality_mode_for(density) == mode


#============================================
def test_font_sizes_stay_in_range() -> None:
	"""
	Every font size is clamped to the printable range at any density.
	"""
	for count in (0, 5, 15, 40):
		analysis = content_fit.analyze_content(_view(ingredients=_long_ingredients(count)))
		sizes = content_fit.font_sizes_for(analysis)
		for value in (
			sizes.meal_name,
			sizes.nutrition_value,
			sizes.nutrition_label,
			sizes.use_by,
			sizes.instructions,
			sizes.ingredients,
			sizes.footer,
		):
			assert meal_label_sheets.config.MIN_FONT_PX <= value <= meal_label_sheets.config.MAX_FONT_PX
		assert sizes.meal_name >= sizes.ingredients


#============================================
def test_dense_labels_use_smaller_type() -> None:
	"""
	A crowded label gets smaller ingredient type than a sparse one.
	"""
	sparse = content_fit.font_sizes_for(content_fit.analyze_content(_view("Rice", "Rice")))
	dense = content_fit.font_sizes_for(content_fit.analyze_content(_view(ingredients=_long_ingredients(30))))
	assert dense.ingredients < sparse.ingredients


#============================================
def test_abbreviation_only_on_dense_labels() -> None:
	"""
	Ingredient wording is shortened only once density crosses the threshold.
	"""
	sparse = content_fit.analyze_content(_view("Rice"))
	assert content_fit.abbreviate_ingredient("Modified Starch", sparse) == "Modified Starch"
	dense = content_fit.analyze_content(_view(ingredients=_long_ingredients(30)))
	assert dense.density >= content_fit.AGGRESSIVE_DENSITY
	assert content_fit.abbreviate_ingredient("Modified Starch", dense) == "Mod. Starch"
	assert content_fit.abbreviate_ingredient("Emulsifier", dense) == "Emuls."
