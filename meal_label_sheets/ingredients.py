"""
Ingredient list formatting with allergen emphasis.
"""

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config


TOKEN_SEPARATOR = mls.config.TOKEN_SEPARATOR
INGREDIENT_BULLET = mls.config.INGREDIENT_BULLET
ALLERGEN_SEPARATOR = mls.config.ALLERGEN_SEPARATOR
BOLD_MARKER = mls.config.BOLD_MARKER
NOT_SPECIFIED_TEXT = mls.config.NOT_SPECIFIED_TEXT


#============================================
def split_tokens(value: str) -> list[str]:
	"""
	Split a ", " separated list, trimming tokens and dropping blanks.

	Args:
		value: Free text list.

	Returns:
		List of tokens.
	"""
	if not value:
		return []
	# a token of separator characters only (", ,") counts as blank
	tokens = [token.strip().strip(",").strip() for token in value.split(TOKEN_SEPARATOR)]
	return [token for token in tokens if token]


#============================================
def is_allergen_match(ingredient: str, allergen_tokens: list[str]) -> bool:
	"""
	Check an ingredient against lowercased allergen tokens.

	Containment is tested both ways, so "Milk Powder" matches "milk" and
	"Egg" matches "eggs". Short tokens can match unrelated words too
	("soy" inside "soybean" and inside any other word containing it).

	Args:
		ingredient: Ingredient token.
		allergen_tokens: Lowercased allergen tokens.

	Returns:
		True if the ingredient should be emphasized.
	"""
	lowered = ingredient.lower()
	for allergen in allergen_tokens:
		if allergen in lowered or lowered in allergen:
			return True
	return False


#============================================
def flag_ingredients(ingredients_csv: str, allergens_csv: str) -> list[tuple[str, bool]]:
	"""
	Pair each ingredient with its allergen flag.

	Args:
		ingredients_csv: Ingredient list.
		allergens_csv: Allergen list.

	Returns:
		List of (ingredient, is_allergen) in input order.
	"""
	allergen_tokens = [token.lower() for token in split_tokens(allergens_csv)]
	flagged: list[tuple[str, bool]] = []
	for ingredient in split_tokens(ingredients_csv):
		flagged.append((ingredient, is_allergen_match(ingredient, allergen_tokens)))
	return flagged


#============================================
def format_ingredients(ingredients_csv: str, allergens_csv: str) -> str:
	"""
	Format ingredients as bulleted lines with allergens wrapped in "**".

	Args:
		ingredients_csv: Ingredient list, e.g. "Beef, Rice, Milk Powder".
		allergens_csv: Allergen list, e.g. "Eggs, Milk".

	Returns:
		Newline-joined lines, or "Not specified" for an empty list.
	"""
	flagged = flag_ingredients(ingredients_csv or "", allergens_csv or "")
	if not flagged:
		return NOT_SPECIFIED_TEXT
	lines: list[str] = []
	for ingredient, matched in flagged:
		if matched:
			ingredient = f"{BOLD_MARKER}{ingredient}{BOLD_MARKER}"
		lines.append(f"{INGREDIENT_BULLET}{ingredient}")
	return "\n".join(lines)


#============================================
def format_allergens(allergens_csv: str) -> str:
	"""
	Format allergens for the allergen block, e.g. "EGGS • MILK".

	Args:
		allergens_csv: Allergen list.

	Returns:
		Upper-cased tokens joined by " • ", or "" when there are none.
	"""
	return ALLERGEN_SEPARATOR.join(token.upper() for token in split_tokens(allergens_csv or ""))


#============================================
def split_markup(line: str) -> list[tuple[str, bool]]:
	"""
	Split a formatted line into (text, bold) runs on "**" markers.

	Args:
		line: One line from format_ingredients.

	Returns:
		Non-empty runs in order.
	"""
	runs: list[tuple[str, bool]] = []
	for index, part in enumerate(line.split(BOLD_MARKER)):
		if part:
			runs.append((part, index % 2 == 1))
	return runs
