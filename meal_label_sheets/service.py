"""
HTTP service that turns a production sheet into a downloadable label file.
"""

# Standard Library
import datetime
import logging
import typing

# PIP3 modules
import fastapi
import fastapi.middleware.cors
import fastapi.responses
import pydantic
import uvicorn

# local repo modules
import meal_label_sheets as mls
import meal_label_sheets.config
import meal_label_sheets.html_render
import meal_label_sheets.records
import meal_label_sheets.render


logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


class LabelRequest(pydantic.BaseModel):
	model_config = pydantic.ConfigDict(populate_by_name=True)

	meal_production: list[dict[str, typing.Any]] = pydantic.Field(alias="mealProduction")
	use_by_date: str | None = pydantic.Field(default=None, alias="useByDate")


#============================================
def error_response(error: Exception) -> fastapi.responses.JSONResponse:
	"""
	Build the 400 response for rejected input.

	Args:
		error: Parse or validation error.

	Returns:
		JSON response {"error": message}.
	"""
	logger.warning("Rejected label request: %s", error)
	return fastapi.responses.JSONResponse(status_code=400, content={"error": str(error)})


#============================================
def attachment_headers(filename: str) -> dict[str, str]:
	"""
	Build download headers for a generated file.
	"""
	return {"Content-Disposition": f'attachment; filename="{filename}"'}


#============================================
def create_app(today_provider: typing.Callable[[], datetime.date] | None = None) -> fastapi.FastAPI:
	"""
	Build the label service application.

	Args:
		today_provider: Returns the batch date; datetime.date.today when None.

	Returns:
		FastAPI application.
	"""
	if today_provider is None:
		today_provider = datetime.date.today

	app = fastapi.FastAPI(title="Meal Label Sheets", version="1.0.0")
	app.add_middleware(
		fastapi.middleware.cors.CORSMiddleware,
		allow_origins=["*"],
		allow_methods=["*"],
		allow_headers=["*"],
	)

	def resolve(request: LabelRequest) -> tuple[list, datetime.date, datetime.date | str]:
		records = mls.records.parse_records(request.meal_production)
		today = today_provider()
		use_by_date = request.use_by_date or mls.config.default_use_by_date(today)
		return (records, today, use_by_date)

	@app.get("/health", tags=["meta"])
	def health() -> dict[str, str]:
		return {"status": "ok"}

	@app.post("/generate-labels", tags=["labels"])
	def generate_labels(request: LabelRequest) -> fastapi.Response:
		try:
			records, today, use_by_date = resolve(request)
			document = mls.html_render.build_labels_document(records, use_by_date, today)
		except ValueError as error:
			return error_response(error)
		filename = mls.html_render.build_download_filename(today)
		logger.info("Generated %s for %d record(s)", filename, len(records))
		return fastapi.responses.HTMLResponse(content=document, headers=attachment_headers(filename))

	@app.post("/generate-labels/pdf", tags=["labels"])
	def generate_labels_pdf(request: LabelRequest) -> fastapi.Response:
		try:
			records, today, use_by_date = resolve(request)
			data, result = mls.render.build_labels_pdf(records, use_by_date, today)
		except ValueError as error:
			return error_response(error)
		if result.pages == 0:
			return error_response(ValueError("No labels to print"))
		filename = mls.html_render.build_download_filename(today, "pdf")
		logger.info("Generated %s with %d page(s)", filename, result.pages)
		return fastapi.Response(
			content=data,
			media_type="application/pdf",
			headers=attachment_headers(filename),
		)

	@app.post("/label-preview", tags=["labels"])
	def label_preview(payload: dict[str, typing.Any]) -> fastapi.Response:
		try:
			view = mls.records.normalize_label_input(payload)
		except ValueError as error:
			return error_response(error)
		fallback = mls.config.default_use_by_date(today_provider())
		config = mls.config.build_default_config()
		document = mls.html_render.wrap_document(
			f"Label Preview - {view.meal_name}",
			mls.html_render.build_sheet_css(config),
			[mls.html_render.render_label_html(view, fallback)],
		)
		return fastapi.responses.HTMLResponse(content=document)

	return app


app = create_app()


#============================================
def main() -> None:
	"""
	Serve the label service with uvicorn.
	"""
	logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
	uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
