"""
Tiling rendered coupons onto fixed-size sheets.
"""

# Standard Library
import dataclasses
import math
import typing

# PIP3 modules
import PIL.Image
import PIL.ImageDraw

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.layout
import coupon_template_engine.records
import coupon_template_engine.render


CouponRecord = cte.records.CouponRecord
LayoutModel = cte.layout.LayoutModel
SheetConfig = cte.config.SheetConfig
SheetGrid = cte.config.SheetGrid

SUPPORTED_DENSITIES = cte.config.SUPPORTED_DENSITIES
SHEET_ROWS = cte.config.SHEET_ROWS
SHEET_BORDER_CSS_PX = cte.config.SHEET_BORDER_CSS_PX
TEMPLATE_WIDTH = cte.config.TEMPLATE_WIDTH
TEMPLATE_HEIGHT = cte.config.TEMPLATE_HEIGHT


@dataclasses.dataclass
class SheetSlot:
	record_index: int
	record: CouponRecord
	row: int
	col: int


@dataclasses.dataclass
class SheetPlan:
	index: int
	slots: list[SheetSlot]


#============================================
def normalize_density(per_page: int) -> int:
	"""
	Pick the supported density closest to the request.

	Args:
		per_page: Requested coupons per sheet.

	Returns:
		One of SUPPORTED_DENSITIES; ties resolve to the smaller one.
	"""
	return min(SUPPORTED_DENSITIES, key=lambda density: (abs(density - per_page), density))


#============================================
def compute_sheet_grid(per_page: int, config: SheetConfig) -> SheetGrid:
	"""
	Compute the tile grid for a density.

	The grid depends only on the density and the sheet config: five rows,
	with one column per five coupons.

	Args:
		per_page: Requested coupons per sheet.
		config: Sheet configuration.

	Returns:
		SheetGrid in output pixels.
	"""
	density = normalize_density(per_page)
	columns = density // SHEET_ROWS
	sheet_width = cte.config.points_to_pixels(config.page_width_pt, config.dpi)
	sheet_height = cte.config.points_to_pixels(config.page_height_pt, config.dpi)
	border_width = max(1, round(cte.config.css_pixels_to_pixels(SHEET_BORDER_CSS_PX, config.dpi)))
	return SheetGrid(
		columns=columns,
		rows=SHEET_ROWS,
		sheet_width=sheet_width,
		sheet_height=sheet_height,
		cell_width=sheet_width / columns,
		cell_height=sheet_height / SHEET_ROWS,
		padding=cte.config.css_pixels_to_pixels(config.padding_css_px, config.dpi),
		border_width=border_width,
	)


#============================================
def plan_sheets(records: list[CouponRecord], per_page: int) -> list[SheetPlan]:
	"""
	Partition records into sheets and assign grid slots.

	Slots fill row by row, left to right.

	Args:
		records: Records in print order.
		per_page: Requested coupons per sheet.

	Returns:
		One SheetPlan per sheet; empty for no records.
	"""
	density = normalize_density(per_page)
	columns = density // SHEET_ROWS
	plans: list[SheetPlan] = []
	for sheet_index in range(math.ceil(len(records) / density)):
		start = sheet_index * density
		slots: list[SheetSlot] = []
		for offset, record in enumerate(records[start:start + density]):
			slots.append(
				SheetSlot(
					record_index=start + offset,
					record=record,
					row=offset // columns,
					col=offset % columns,
				)
			)
		plans.append(SheetPlan(index=sheet_index, slots=slots))
	return plans


#============================================
def compute_tile_box(grid: SheetGrid, row: int, col: int) -> tuple[int, int, int, int]:
	"""
	Compute where a coupon lands inside a cell.

	The coupon keeps its aspect ratio and is anchored at the padded cell origin.

	Args:
		grid: Sheet grid.
		row: Row index.
		col: Column index.

	Returns:
		Tuple of (x, y, width, height) in sheet pixels.
	"""
	available_width = grid.cell_width - 2.0 * grid.padding
	available_height = grid.cell_height - 2.0 * grid.padding
	scale = min(available_width / TEMPLATE_WIDTH, available_height / TEMPLATE_HEIGHT)
	cell_x = col * grid.cell_width + grid.padding
	cell_y = row * grid.cell_height + grid.padding
	return (
		round(cell_x),
		round(cell_y),
		max(1, round(TEMPLATE_WIDTH * scale)),
		max(1, round(TEMPLATE_HEIGHT * scale)),
	)


#============================================
def draw_cell_border(draw: PIL.ImageDraw.ImageDraw, grid: SheetGrid, row: int, col: int, color: str) -> None:
	"""
	Outline the padded cell of a placed coupon.

	Args:
		draw: Sheet drawing context.
		grid: Sheet grid.
		row: Row index.
		col: Column index.
		color: Outline color.
	"""
	cell_x = col * grid.cell_width + grid.padding
	cell_y = row * grid.cell_height + grid.padding
	draw.rectangle(
		(
			cell_x,
			cell_y,
			cell_x + grid.cell_width - 2.0 * grid.padding,
			cell_y + grid.cell_height - 2.0 * grid.padding,
		),
		outline=color,
		width=grid.border_width,
	)


#============================================
def render_sheet(
	plan: SheetPlan,
	layout: LayoutModel,
	template_image: PIL.Image.Image,
	grid: SheetGrid,
	config: SheetConfig,
) -> PIL.Image.Image:
	"""
	Render one sheet of tiled coupons.

	Args:
		plan: Records and slots for this sheet.
		layout: Layout model.
		template_image: Loaded template, shared by every tile.
		grid: Sheet grid.
		config: Sheet configuration.

	Returns:
		RGB sheet image.
	"""
	sheet = PIL.Image.new("RGB", (grid.sheet_width, grid.sheet_height), "#ffffff")
	draw = PIL.ImageDraw.Draw(sheet)
	for slot in plan.slots:
		coupon = cte.render.render_coupon_image(slot.record, layout, template_image)
		x, y, width, height = compute_tile_box(grid, slot.row, slot.col)
		tile = coupon.resize((width, height), PIL.Image.Resampling.LANCZOS)
		sheet.paste(tile, (x, y))
		if config.draw_borders:
			draw_cell_border(draw, grid, slot.row, slot.col, config.border_color)
	return sheet


#============================================
def iter_sheet_images(
	records: list[CouponRecord],
	layout: LayoutModel,
	template_image: PIL.Image.Image,
	per_page: int,
	config: SheetConfig | None = None,
) -> typing.Iterator[PIL.Image.Image]:
	"""
	Yield rendered sheets one at a time.

	Callers that must stay responsive can render one sheet per tick.

	Args:
		records: Records in print order.
		layout: Layout model.
		template_image: Loaded template image.
		per_page: Requested coupons per sheet.
		config: Sheet configuration; defaults to A4 at the default dpi.

	Yields:
		Sheet images in record order.
	"""
	if config is None:
		config = SheetConfig()
	plans = plan_sheets(records, per_page)
	if not plans:
		return
	grid = compute_sheet_grid(per_page, config)
	reconciled = layout.reconciled()
	template = cte.render.prepare_template(template_image)
	for plan in plans:
		yield render_sheet(plan, reconciled, template, grid, config)


def render_sheets(
	records: list[CouponRecord],
	layout: LayoutModel,
	template_image: PIL.Image.Image,
	per_page: int,
	config: SheetConfig | None = None,
) -> list[PIL.Image.Image]:
	return list(iter_sheet_images(records, layout, template_image, per_page, config))
