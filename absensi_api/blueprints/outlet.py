# absensi_api/blueprints/outlet.py
from __future__ import annotations

from datetime import datetime

from flask import Blueprint, request

from absensi_api.extensions import db
from absensi_api.common.http import ok, fail
from absensi_api.models.attendance import OutletConfig

bp = Blueprint("outlet", __name__, url_prefix="/api/v1/outlet")


def _row(c: OutletConfig):
    return {
        "latitude": c.latitude,
        "longitude": c.longitude,
        "radius_m": c.radius_m,
        "clock_in_time": c.clock_in_time.strftime("%H:%M"),
        "clock_out_time": c.clock_out_time.strftime("%H:%M"),
    }


def _parse_hhmm(s):
    try:
        return datetime.strptime(str(s).strip(), "%H:%M").time()
    except (TypeError, ValueError):
        return None


@bp.get("")
def get_outlet():
    return ok(_row(OutletConfig.current()))


@bp.put("")
def put_outlet():
    c = OutletConfig.current()
    d = request.get_json(silent=True) or {}

    for k in ("latitude", "longitude"):
        if k in d:
            try:
                setattr(c, k, float(d[k]))
            except (TypeError, ValueError):
                return fail(f"{k} must be a number", 422)
    if "radius_m" in d:
        try:
            r = int(d["radius_m"])
        except (TypeError, ValueError):
            return fail("radius_m must be an integer", 422)
        if r <= 0:
            return fail("radius_m must be > 0", 422)
        c.radius_m = r
    for k in ("clock_in_time", "clock_out_time"):
        if k in d:
            t = _parse_hhmm(d[k])
            if t is None:
                return fail(f"{k} must be HH:MM", 422)
            setattr(c, k, t)

    db.session.commit()
    return ok(_row(c))
