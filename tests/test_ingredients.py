import meal_label_sheets.ingredients as ingredients


#============================================
def test_allergen_ingredients_are_bolded() -> None:
	"""
	Ingredients containing an allergen token are wrapped in bold markers.
	"""
	result = ingredients.format_ingredients("Beef, Rice, Milk Powder", "Milk")
	assert result == "• Beef\n• Rice\n• **Milk Powder**"


#============================================
def test_match_is_case_insensitive_both_ways() -> None:
	"""
	"Egg" matches "eggs" because containment is checked in both directions.
	"""
	result = ingredients.format_ingredients("Egg, Oats", "EGGS")
	assert result.splitlines() == ["• **Egg**", "• Oats"]


#============================================
def test_short_allergen_tokens_over_match() -> None:
	"""
	Substring matching also flags unrelated words that contain the token.
	"""
	flagged = ingredients.flag_ingredients("Soybean Oil, Rice", "soy")
	assert flagged == [("Soybean Oil", True), ("Rice", False)]
	flagged = ingredients.flag_ingredients("Sesame Seeds", "Sesame Seeds Paste")
	assert flagged == [("Sesame Seeds", True)]


#============================================
def test_empty_ingredients_are_not_specified() -> None:
	"""
	An empty ingredient list renders the placeholder text.
	"""
	assert ingredients.format_ingredients("", "Milk") == "Not specified"
	assert ingredients.format_ingredients(None, None) == "Not specified"
	assert ingredients.format_ingredients(", ,", "") == "Not specified"


#============================================
def test_empty_allergens_bold_nothing() -> None:
	"""
	No allergen tokens means no ingredient is emphasized.
	"""
	result = ingredients.format_ingredients("Chicken, Rice", "")
	assert "**" not in result
	assert result == "• Chicken\n• Rice"


#============================================
def test_blank_tokens_are_dropped() -> None:
	"""
	Blank tokens between separators do not produce bullets or matches.
	"""
	assert ingredients.split_tokens("Beef, , Rice, ") == ["Beef", "Rice"]
	flagged = ingredients.flag_ingredients("Beef, Rice", "Milk, , ")
	assert flagged == [("Beef", False), ("Rice", False)]


#============================================
def test_format_allergens_uppercases_and_joins() -> None:
	"""
	The allergen block is upper-cased and joined with bullets.
	"""
	assert ingredients.format_allergens("Eggs, Milk") == "EGGS • MILK"
	assert ingredients.format_allergens("") == ""


#============================================
def test_split_markup_runs() -> None:
	"""
	Formatted lines split back into plain and bold runs.
	"""
	assert ingredients.split_markup("• **Milk Powder**") == [("• ", False), ("Milk Powder", True)]
	assert ingredients.split_markup("• Rice") == [("• Rice", False)]


#============================================
def test_separator_only_tokens_are_blank() -> None:
	"""
	Stray commas left between separators do not become ingredients.
	"""
	assert ingredients.split_tokens(", ,") == []
	assert ingredients.split_tokens("Beef, ,, Rice") == ["Beef", "Rice"]
	assert ingredients.format_allergens(", ,") == ""
