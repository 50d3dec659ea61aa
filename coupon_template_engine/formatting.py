"""
Display formatting for coupon values.
"""

# Standard Library
import datetime
import logging
import re


RUPEES_SYMBOL = "₹"

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DAY_FIRST_RE = re.compile(r"^(\d{2})[-/](\d{2})[-/](\d{4})$")

logger = logging.getLogger(__name__)


#============================================
def format_rupees(amount: float | int | str | None, decimals: int = 2) -> str:
	"""
	Format an amount as Indian Rupees.

	Args:
		amount: Numeric amount or numeric string.
		decimals: Decimal places.

	Returns:
		String like "₹100.00". Non-numeric input is returned as text.
	"""
	if amount is None:
		return ""
	try:
		value = float(amount)
	except (TypeError, ValueError):
		return str(amount)
	return f"{RUPEES_SYMBOL}{value:.{decimals}f}"


#============================================
def parse_date(value: str) -> datetime.date | None:
	"""
	Parse the date shapes the dashboard stores.

	Args:
		value: Date string.

	Returns:
		Parsed date, or None.
	"""
	text = value.strip()
	if ISO_DATE_RE.match(text):
		return datetime.date.fromisoformat(text)
	match = DAY_FIRST_RE.match(text)
	if match:
		day, month, year = (int(part) for part in match.groups())
		return datetime.date(year, month, day)
	return datetime.datetime.fromisoformat(text.replace("Z", "+00:00")).date()


#============================================
def format_date_ddmmyyyy(value: datetime.date | datetime.datetime | str | None) -> str:
	"""
	Render a date as dd-mm-yyyy.

	Args:
		value: Date, datetime, or date string.

	Returns:
		Formatted date, or the original text when it cannot be parsed.
	"""
	if value is None or value == "":
		return ""
	if isinstance(value, datetime.datetime):
		date_value = value.date()
	elif isinstance(value, datetime.date):
		date_value = value
	else:
		try:
			date_value = parse_date(str(value))
		except ValueError:
			logger.debug("Leaving unparseable date %r as-is", value)
			return str(value)
	return date_value.strftime("%d-%m-%Y")
