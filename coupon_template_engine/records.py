"""
Coupon data records and the field values drawn from them.
"""

# Standard Library
import csv
import dataclasses
import json
import pathlib

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.formatting


format_rupees = cte.formatting.format_rupees
format_date_ddmmyyyy = cte.formatting.format_date_ddmmyyyy

# wire key -> attribute, camelCase as stored by the dashboard
RECORD_KEYS = {
	"name": "name",
	"empId": "emp_id",
	"emp_id": "emp_id",
	"serialCode": "serial_code",
	"serial_code": "serial_code",
	"issueDate": "issue_date",
	"issue_date": "issue_date",
	"validTill": "valid_till",
	"valid_till": "valid_till",
	"amount": "amount",
}


@dataclasses.dataclass
class CouponRecord:
	name: str = ""
	emp_id: str = ""
	serial_code: str = ""
	issue_date: str = ""
	valid_till: str = ""
	amount: float | None = None
	extra: dict[str, str] = dataclasses.field(default_factory=dict)

	@classmethod
	def from_mapping(cls, data: dict) -> "CouponRecord":
		values: dict = {}
		extra: dict[str, str] = {}
		for key, value in data.items():
			attribute = RECORD_KEYS.get(key)
			if attribute is None:
				if value is not None:
					extra[str(key)] = str(value)
				continue
			values[attribute] = value
		amount = values.pop("amount", None)
		if amount is not None and amount != "":
			try:
				amount = float(amount)
			except (TypeError, ValueError):
				amount = None
		else:
			amount = None
		text_values = {key: "" if value is None else str(value) for key, value in values.items()}
		return cls(amount=amount, extra=extra, **text_values)


#============================================
def field_value(record: CouponRecord, field_id: str) -> str:
	"""
	Look up the display text for a layout field.

	Args:
		record: Coupon record.
		field_id: Layout field id.

	Returns:
		Text to draw. Unknown ids fall back to the record's extra values.
	"""
	if field_id == "name":
		return record.name
	if field_id == "empId":
		return record.emp_id
	if field_id == "date":
		return format_date_ddmmyyyy(record.issue_date)
	if field_id == "validTill":
		return format_date_ddmmyyyy(record.valid_till)
	if field_id == "serial":
		return record.serial_code
	if field_id == "amount":
		if record.amount is None:
			return ""
		return format_rupees(record.amount)
	return record.extra.get(field_id, "")


def qr_payload(record: CouponRecord) -> str:
	return record.serial_code or record.emp_id or record.name


#============================================
def load_records(path: pathlib.Path) -> list[CouponRecord]:
	"""
	Load coupon records from a JSON array or a CSV file.

	Args:
		path: Input path; .csv is read with a header row, anything else as JSON.

	Returns:
		Records in file order.
	"""
	if path.suffix.lower() == ".csv":
		with path.open("r", encoding="utf-8-sig", newline="") as handle:
			rows = list(csv.DictReader(handle))
	else:
		rows = json.loads(path.read_text(encoding="utf-8"))
		if isinstance(rows, dict):
			rows = rows.get("records", [])
	return [CouponRecord.from_mapping(row) for row in rows]
