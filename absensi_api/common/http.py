# absensi_api/common/http.py
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app, jsonify

def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status

def fail(message="Bad Request", status=400, code=None, detail=None, errors=None):
    err = {"message": message}
    if code: err["code"] = code
    if detail: err["detail"] = detail
    if errors: err["errors"] = errors
    return jsonify({"success": False, "error": err}), status

# ---------- parsing helpers shared by blueprints ----------
def parse_date(s):
    if not s: return None
    if isinstance(s, date): return s
    for fmt in ("%Y-%m-%d", "%d-%m-%Y"):
        try: return datetime.strptime(str(s).strip(), fmt).date()
        except ValueError: pass
    return None

def parse_dec(x):
    if x is None or x == "": return None
    try: return Decimal(str(x))
    except (InvalidOperation, ValueError): return None

def flt(x):
    return float(x) if x is not None else None

def outlet_now():
    """Naive wall-clock datetime in the outlet's APP_TIMEZONE."""
    tz = ZoneInfo(current_app.config.get("APP_TIMEZONE", "Asia/Jakarta"))
    return datetime.now(tz).replace(tzinfo=None)

def to_outlet_time(dt):
    """Aware datetimes are converted to outlet wall-clock; naive ones are taken as already local."""
    if dt.tzinfo is None:
        return dt
    tz = ZoneInfo(current_app.config.get("APP_TIMEZONE", "Asia/Jakarta"))
    return dt.astimezone(tz).replace(tzinfo=None)
