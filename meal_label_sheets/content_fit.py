"""
Content density analysis for fitting label text into a fixed label.

Dense labels (long names, long ingredient lists) get smaller type and
abbreviated ingredient words; sparse labels get larger type, always within
MIN_FONT_PX..MAX_FONT_PX.
"""

# Standard Library
import dataclasses
import math
import re

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config
import meal_label_sheets.records


LabelView = mls.records.LabelView

DEFAULT_STORAGE_INSTRUCTIONS = mls.config.DEFAULT_STORAGE_INSTRUCTIONS
MIN_FONT_PX = mls.config.MIN_FONT_PX
MAX_FONT_PX = mls.config.MAX_FONT_PX

# (minimum density, mode), checked top down
QUALITY_THRESHOLDS = (
	(85, "emergency"),
	(70, "compressed"),
	(55, "optimized"),
	(35, "optimal"),
	(20, "enhanced"),
	(0, "premium"),
)
# percent scale range (at density 100, at density 0) and spacing scale
QUALITY_SETTINGS = {
	"emergency": ((-30.0, -20.0), 0.7),
	"compressed": ((-25.0, -15.0), 0.8),
	"optimized": ((-15.0, -5.0), 0.9),
	"optimal": ((-5.0, 5.0), 1.0),
	"enhanced": ((5.0, 15.0), 1.1),
	"premium": ((15.0, 25.0), 1.2),
}
MIN_SCALES = {
	"meal_name": 3.0 / 3.5,
	"nutrition": 2.0 / 2.2,
	"instructions": 1.6 / 1.8,
	"ingredients": 1.4 / 1.6,
	"footer": 1.3 / 1.5,
}
ABBREVIATE_DENSITY = 50
AGGRESSIVE_DENSITY = 70
BASIC_ABBREVIATIONS = (
	("Natural flavourings", "Natural flavours"),
	("Emulsifier", "Emuls."),
	("Stabiliser", "Stab."),
	("Preservative", "Pres."),
	("Antioxidant", "Antiox."),
	("Acidity regulator", "Acid. reg."),
	("Colour", "Col."),
	("Flavour enhancer", "Flav. enh."),
)
AGGRESSIVE_ABBREVIATIONS = (
	("Modified", "Mod."),
	("Concentrate", "Conc."),
	("Extract", "Ext."),
	("Powder", "Pwd."),
	("Vitamin", "Vit."),
	("Mineral", "Min."),
	("Protein", "Prot."),
	("Calcium", "Ca"),
	("Sodium", "Na"),
	("Potassium", "K"),
	("Phosphorus", "P"),
)
EMERGENCY_ABBREVIATIONS = (
	(r"\band\b", "&"),
	(r"\bcontains\b", "cont."),
	(r"\bincluding\b", "incl."),
	(r"\bderived from\b", "from"),
	(r"\bmay contain\b", "may cont."),
	(r"\bproduced in\b", "prod. in"),
)


@dataclasses.dataclass(frozen=True)
class ScalingFactors:
	meal_name: float
	nutrition: float
	instructions: float
	ingredients: float
	footer: float
	spacing: float


@dataclasses.dataclass(frozen=True)
class ContentAnalysis:
	density: int
	quality_mode: str
	scaling: ScalingFactors


@dataclasses.dataclass(frozen=True)
class FontSizes:
	meal_name: float
	nutrition_value: float
	nutrition_label: float
	use_by: float
	instructions: float
	ingredients: float
	footer: float


#============================================
def _count_items(value: str) -> int:
	"""
	Count comma separated items the way the density score expects.
	"""
	if not value:
		return 0
	return len(value.split(","))


#============================================
def content_density(view: LabelView) -> int:
	"""
	Score how crowded a label will be.

	Args:
		view: Label view.

	Returns:
		Density score from 0 to 100.
	"""
	storage = view.storage_instructions or DEFAULT_STORAGE_INSTRUCTIONS
	meal_length = len(view.meal_name)
	ingredients_length = len(view.ingredients or "")
	allergens_length = len(view.allergens or "")
	total_characters = meal_length + ingredients_length + allergens_length + len(storage)

	meal_words = len(view.meal_name.split(" "))
	ingredient_count = _count_items(view.ingredients)
	allergen_count = _count_items(view.allergens)

	score = min((meal_length + meal_words * 3) * 1.2, 25.0)
	score += min((ingredients_length + ingredient_count * 8) * 0.12, 40.0)
	score += min(allergens_length * 0.8 + allergen_count * 4, 15.0)
	score += min(len(storage) * 0.1, 10.0)

	if ingredients_length > 300:
		score += 15
	if ingredient_count > 12:
		score += 10
	if meal_length > 25:
		score += 8
	if allergen_count > 6:
		score += 8
	if total_characters > 500:
		score += 12
	return min(int(math.floor(score + 0.5)), 100)


#============================================
def quality_mode_for(density: int) -> str:
	"""
	Map a density score to a quality mode.

	Args:
		density: Density score.

	Returns:
		Mode name, "premium" for sparse labels up to "emergency".
	"""
	for minimum, mode in QUALITY_THRESHOLDS:
		if density >= minimum:
			return mode
	return "premium"


#============================================
def scaling_for(density: int, quality_mode: str) -> ScalingFactors:
	"""
	Compute per-section scale factors.

	Args:
		density: Density score.
		quality_mode: Mode from quality_mode_for.

	Returns:
		ScalingFactors with minimum scales enforced.
	"""
	(low, high), spacing = QUALITY_SETTINGS[quality_mode]
	normalized = max(0.0, min(1.0, density / 100.0))
	factor = 1.0 + (low + (high - low) * (1.0 - normalized)) / 100.0
	return ScalingFactors(
		meal_name=max(factor, MIN_SCALES["meal_name"]),
		nutrition=max(factor * 0.95, MIN_SCALES["nutrition"]),
		instructions=max(factor * 0.9, MIN_SCALES["instructions"]),
		ingredients=max(factor * 0.85, MIN_SCALES["ingredients"]),
		footer=max(factor * 0.8, MIN_SCALES["footer"]),
		spacing=spacing,
	)


#============================================
def analyze_content(view: LabelView) -> ContentAnalysis:
	"""
	Analyze a label's content.

	Args:
		view: Label view.

	Returns:
		ContentAnalysis.
	"""
	density = content_density(view)
	mode = quality_mode_for(density)
	return ContentAnalysis(density=density, quality_mode=mode, scaling=scaling_for(density, mode))


#============================================
def clamp_font(size: float) -> float:
	"""
	Clamp a font size into the printable range.

	Args:
		size: Font size in px.

	Returns:
		Clamped size rounded to 0.1px.
	"""
	return round(max(MIN_FONT_PX, min(MAX_FONT_PX, size)), 1)


#============================================
def font_sizes_for(analysis: ContentAnalysis) -> FontSizes:
	"""
	Scale the base font sizes for an analyzed label.

	The meal name stays the largest text at any density.

	Args:
		analysis: Content analysis.

	Returns:
		FontSizes in px.
	"""
	scaling = analysis.scaling
	return FontSizes(
		meal_name=clamp_font(mls.config.MEAL_NAME_FONT_PX * scaling.meal_name),
		nutrition_value=clamp_font(mls.config.NUTRITION_VALUE_FONT_PX * scaling.nutrition),
		nutrition_label=clamp_font(mls.config.NUTRITION_LABEL_FONT_PX * scaling.nutrition),
		use_by=clamp_font(mls.config.USE_BY_FONT_PX * scaling.instructions),
		instructions=clamp_font(mls.config.INSTRUCTIONS_FONT_PX * scaling.instructions),
		ingredients=clamp_font(mls.config.INGREDIENTS_FONT_PX * scaling.ingredients),
		footer=clamp_font(mls.config.FOOTER_FONT_PX * scaling.footer),
	)


#============================================
def abbreviate_ingredient(text: str, analysis: ContentAnalysis) -> str:
	"""
	Shorten ingredient wording on crowded labels.

	Only display text changes; allergen flags are computed beforehand.

	Args:
		text: Ingredient text.
		analysis: Content analysis.

	Returns:
		Possibly abbreviated text.
	"""
	if analysis.density < ABBREVIATE_DENSITY:
		return text
	for full, short in BASIC_ABBREVIATIONS:
		text = re.sub(re.escape(full), short, text, flags=re.IGNORECASE)
	if analysis.density >= AGGRESSIVE_DENSITY:
		for full, short in AGGRESSIVE_ABBREVIATIONS:
			text = re.sub(rf"\b{full}\b", short, text, flags=re.IGNORECASE)
	if analysis.quality_mode == "emergency":
		for pattern, short in EMERGENCY_ABBREVIATIONS:
			text = re.sub(pattern, short, text, flags=re.IGNORECASE)
	return text
