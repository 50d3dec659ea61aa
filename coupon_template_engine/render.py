"""
Single coupon rendering.
"""

# Standard Library
import functools
import logging

# PIP3 modules
import PIL.Image
import PIL.ImageColor
import PIL.ImageDraw
import PIL.ImageFont
import qrcode
import qrcode.constants
import qrcode.exceptions

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.layout
import coupon_template_engine.records


Field = cte.layout.Field
LayoutModel = cte.layout.LayoutModel
CouponRecord = cte.records.CouponRecord

TEMPLATE_WIDTH = cte.config.TEMPLATE_WIDTH
TEMPLATE_HEIGHT = cte.config.TEMPLATE_HEIGHT
QR_FIELD_ID = cte.config.QR_FIELD_ID
SERIAL_FIELD_ID = cte.config.SERIAL_FIELD_ID
DEFAULT_FONT_REGULAR = cte.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = cte.config.DEFAULT_FONT_BOLD
SERIAL_BACKDROP_COLOR = cte.config.SERIAL_BACKDROP_COLOR
SERIAL_BACKDROP_PAD_X = cte.config.SERIAL_BACKDROP_PAD_X
SERIAL_BACKDROP_PAD_Y = cte.config.SERIAL_BACKDROP_PAD_Y
QR_BORDER = cte.config.QR_BORDER

logger = logging.getLogger(__name__)


#============================================
def parse_color(value: str) -> tuple[int, int, int]:
	"""
	Parse a CSS color string into RGB.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (r, g, b); black when the value is unusable.
	"""
	if not value:
		return (0, 0, 0)
	try:
		color = PIL.ImageColor.getrgb(value)
	except ValueError:
		return (0, 0, 0)
	return (color[0], color[1], color[2])


#============================================
def map_font_name(font_weight: str) -> str:
	"""
	Map a field font weight to a TrueType font file.

	Args:
		font_weight: "normal" or "bold".

	Returns:
		Font file name.
	"""
	if font_weight == "bold":
		return DEFAULT_FONT_BOLD
	return DEFAULT_FONT_REGULAR


#============================================
@functools.lru_cache(maxsize=64)
def load_font(font_name: str, size: int) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load a font at a pixel size, falling back to Pillow's bundled font.

	Args:
		font_name: TrueType file name.
		size: Pixel size.

	Returns:
		Font object.
	"""
	size = max(1, int(size))
	try:
		return PIL.ImageFont.truetype(font_name, size)
	except OSError:
		logger.debug("Font %s not found; using Pillow default", font_name)
		return PIL.ImageFont.load_default(size=size)


#============================================
def draw_text_field(
	image: PIL.Image.Image,
	field: Field,
	text: str,
) -> tuple[float, float, float, float] | None:
	"""
	Draw a single line of text at a field's top-left corner.

	Text is neither wrapped nor clipped to the field box. Line breaks in
	the value are drawn as spaces.

	Args:
		image: RGBA surface to draw on.
		field: Layout field.
		text: Text to draw.

	Returns:
		Bounding box of the drawn text, or None for empty text.
	"""
	text = " ".join(text.splitlines())
	if not text:
		return None
	font = load_font(map_font_name(field.font_weight), round(field.font_size))
	left, top, right, bottom = font.getbbox(text, anchor="la")
	bbox = (field.x + left, field.y + top, field.x + right, field.y + bottom)

	if field.id == SERIAL_FIELD_ID:
		overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
		PIL.ImageDraw.Draw(overlay).rectangle(
			(
				bbox[0] - SERIAL_BACKDROP_PAD_X,
				bbox[1] - SERIAL_BACKDROP_PAD_Y,
				bbox[2] + SERIAL_BACKDROP_PAD_X,
				bbox[3] + SERIAL_BACKDROP_PAD_Y,
			),
			fill=SERIAL_BACKDROP_COLOR,
		)
		image.alpha_composite(overlay)

	draw = PIL.ImageDraw.Draw(image)
	draw.text((field.x, field.y), text, font=font, fill=parse_color(field.color), anchor="la")
	return bbox


#============================================
def build_qr_image(payload: str, size: tuple[int, int]) -> PIL.Image.Image:
	"""
	Build a scan code image sized to a field box.

	Args:
		payload: Data to encode.
		size: Target (width, height) in pixels.

	Returns:
		RGB image of the requested size.
	"""
	code = qrcode.QRCode(
		error_correction=qrcode.constants.ERROR_CORRECT_M,
		border=QR_BORDER,
		box_size=10,
	)
	code.add_data(payload)
	code.make(fit=True)
	qr_image = code.make_image(fill_color="black", back_color="white").get_image()
	return qr_image.convert("RGB").resize(size, PIL.Image.Resampling.NEAREST)


#============================================
def draw_qr_field(image: PIL.Image.Image, field: Field, payload: str) -> bool:
	"""
	Paste a scan code into a field box.

	Args:
		image: Surface to draw on.
		field: The qr field.
		payload: Data to encode.

	Returns:
		True when a code was drawn.
	"""
	if not payload:
		logger.warning("No scan code payload; skipping qr field")
		return False
	size = (max(1, round(field.width)), max(1, round(field.height)))
	try:
		qr_image = build_qr_image(payload, size)
	except (qrcode.exceptions.DataOverflowError, ValueError) as error:
		logger.error("Failed to generate scan code for %r: %s", payload, error)
		return False
	image.paste(qr_image, (round(field.x), round(field.y)))
	return True


#============================================
def prepare_template(template_image: PIL.Image.Image) -> PIL.Image.Image:
	"""
	Bring a template to the native design size.

	Batch callers prepare once and share the result across tiles.

	Args:
		template_image: Loaded template image.

	Returns:
		The same image when it already has the design size, else a resized RGB copy.
	"""
	size = (TEMPLATE_WIDTH, TEMPLATE_HEIGHT)
	if template_image.size == size:
		return template_image
	return template_image.convert("RGB").resize(size, PIL.Image.Resampling.LANCZOS)


#============================================
def render_coupon_image(
	record: CouponRecord,
	layout: LayoutModel,
	template_image: PIL.Image.Image,
) -> PIL.Image.Image:
	"""
	Render one record onto the template at the native design size.

	Args:
		record: Coupon record.
		layout: Layout model; its toggles decide whether qr and amount appear.
		template_image: Loaded template image.

	Returns:
		RGB image of TEMPLATE_WIDTH x TEMPLATE_HEIGHT.
	"""
	if template_image is None:
		raise ValueError("render_coupon_image needs a loaded template image")
	surface = prepare_template(template_image).convert("RGBA")

	for field in layout.reconciled().fields:
		if field.id == QR_FIELD_ID:
			draw_qr_field(surface, field, cte.records.qr_payload(record))
			continue
		draw_text_field(surface, field, cte.records.field_value(record, field.id))

	return surface.convert("RGB")
