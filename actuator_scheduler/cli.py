"""
Command-line client for the actuator scheduler HTTP API.

Usage:
    actuator-scheduler list
    actuator-scheduler schedule 0 --start 2026-01-05 --days 3
    actuator-scheduler add-slot 1 --start-time 08:00 --end-time 10:00 \\
        --start-date 2026-01-01 --end-date 2026-01-31 --days mon,tue,wed,thu,fri --state 21.5
    actuator-scheduler add-override 1 0 --start-time 08:30 --end-time 09:30 \\
        --start-date 2026-01-06 --end-date 2026-01-06

States are given as text: "on", "off" or a number.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from datetime import date
from typing import Any, Optional, Sequence

import httpx

from .core.config import settings
from .domain.models import FloatState, ToggleState, parse_actuator_state

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class ApiError(Exception):
    def __init__(self, status_code: int, detail: Any) -> None:
        self.status_code = status_code
        self.detail = detail
        if isinstance(detail, dict) and "message" in detail:
            text = detail["message"]
        else:
            text = str(detail)
        super().__init__(f"HTTP {status_code}: {text}")


class SchedulerClient:
    """Thin synchronous wrapper over the HTTP API."""

    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def _call(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        resp = self._http.request(method, path, json=json, params=params)
        if resp.is_error:
            try:
                detail = resp.json().get("detail")
            except ValueError:
                detail = resp.text
            raise ApiError(resp.status_code, detail)
        return resp.json()

    def list_actuators(self) -> dict[str, Any]:
        return self._call("GET", "/actuators")

    def get_schedule(self, actuator_id: int, start: Optional[date] = None, days: Optional[int] = None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if start is not None:
            params["start"] = start.isoformat()
        if days is not None:
            params["days"] = days
        return self._call("GET", f"/actuators/{actuator_id}/schedule", params=params)

    def set_default_state(self, actuator_id: int, state: dict[str, Any]) -> None:
        self._call("PUT", f"/actuators/{actuator_id}/default-state", json={"state": state})

    def add_time_slot(self, actuator_id: int, period: dict[str, Any], state: dict[str, Any], enabled: bool) -> int:
        body = {"time_period": period, "actuator_state": state, "enabled": enabled}
        return self._call("POST", f"/actuators/{actuator_id}/timeslots", json=body)["id"]

    def remove_time_slot(self, actuator_id: int, slot_id: int) -> None:
        self._call("DELETE", f"/actuators/{actuator_id}/timeslots/{slot_id}")

    def set_time_period(self, actuator_id: int, slot_id: int, period: dict[str, Any]) -> None:
        self._call("PATCH", f"/actuators/{actuator_id}/timeslots/{slot_id}/time-period", json=period)

    def set_enabled(self, actuator_id: int, slot_id: int, enabled: bool) -> None:
        self._call("PUT", f"/actuators/{actuator_id}/timeslots/{slot_id}/enabled", json={"enabled": enabled})

    def set_state(self, actuator_id: int, slot_id: int, state: dict[str, Any]) -> None:
        self._call("PUT", f"/actuators/{actuator_id}/timeslots/{slot_id}/state", json={"state": state})

    def add_override(self, actuator_id: int, slot_id: int, period: dict[str, Any]) -> int:
        return self._call("POST", f"/actuators/{actuator_id}/timeslots/{slot_id}/overrides", json=period)["id"]

    def remove_override(self, actuator_id: int, slot_id: int, override_id: int) -> None:
        self._call("DELETE", f"/actuators/{actuator_id}/timeslots/{slot_id}/overrides/{override_id}")


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------

def state_arg(text: str) -> dict[str, Any]:
    try:
        state = parse_actuator_state(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid state {text!r}, expected on, off or a number")
    if isinstance(state, ToggleState):
        return {"kind": "toggle", "on": state.on}
    assert isinstance(state, FloatState)
    if not math.isfinite(state.value):
        raise argparse.ArgumentTypeError(f"invalid state {text!r}, value must be finite")
    return {"kind": "float", "value": state.value}


def days_arg(text: str) -> list[str]:
    return [d.strip().lower() for d in text.split(",") if d.strip()]


def _period_body(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "start_time": args.start_time,
        "end_time": args.end_time,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "days": args.days or [],
    }


def _add_period_args(p: argparse.ArgumentParser, required: bool) -> None:
    p.add_argument("--start-time", required=required, help="HH:MM")
    p.add_argument("--end-time", required=required, help="HH:MM")
    p.add_argument("--start-date", required=required, help="YYYY-MM-DD")
    p.add_argument("--end-date", required=required, help="YYYY-MM-DD")
    p.add_argument("--days", type=days_arg, default=None, help="Comma separated, e.g. mon,tue (default: every day)")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_actuators(actuators: dict[str, Any]) -> str:
    lines = []
    for aid, a in actuators.items():
        lines.append(
            f"[{aid}] {a['name']}  type={a['actuator_type']['display']}  "
            f"default={a['default_state']['display']}"
        )
        for tid, ts in a["timeslots"].items():
            p = ts["time_period"]
            days = ",".join(p["days"]) or "every day"
            flag = "" if ts["enabled"] else "  (disabled)"
            lines.append(
                f"    slot {tid}: {p['start_time']}-{p['end_time']} {p['start_date']}..{p['end_date']} "
                f"{days} -> {ts['actuator_state']['display']}{flag}"
            )
            for oid, o in ts["time_override"].items():
                lines.append(
                    f"        override {oid}: {o['start_time']}-{o['end_time']} "
                    f"{o['start_date']}..{o['end_date']} {','.join(o['days']) or 'every day'}"
                )
    return "\n".join(lines)


def render_schedule(schedule: dict[str, Any]) -> str:
    lines = []
    for day, slots in schedule["days"].items():
        lines.append(f"{day} {date.fromisoformat(day).strftime('%a')}")
        if not slots:
            lines.append("    (default state)")
        for s in slots:
            origin = f"slot {s['timeslot_id']}"
            if s["override_id"] is not None:
                origin += f", override {s['override_id']}"
            lines.append(f"    {s['start_time']}-{s['end_time']}  {s['actuator_state']['display']}  ({origin})")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="actuator-scheduler", description="Actuator scheduler client")
    p.add_argument("--url", default=settings.api_url, help=f"API base URL (default: {settings.api_url})")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List actuators and their time slots")

    s = sub.add_parser("schedule", help="Show the computed schedule")
    s.add_argument("actuator_id", type=int)
    s.add_argument("--start", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today)")
    s.add_argument("--days", type=int, default=None)

    s = sub.add_parser("set-default", help="Set the default state")
    s.add_argument("actuator_id", type=int)
    s.add_argument("state", type=state_arg)

    s = sub.add_parser("add-slot", help="Add a time slot")
    s.add_argument("actuator_id", type=int)
    _add_period_args(s, required=True)
    s.add_argument("--state", type=state_arg, required=True)
    s.add_argument("--disabled", action="store_true")

    s = sub.add_parser("remove-slot", help="Remove a time slot")
    s.add_argument("actuator_id", type=int)
    s.add_argument("slot_id", type=int)

    s = sub.add_parser("set-period", help="Change some fields of a time slot period")
    s.add_argument("actuator_id", type=int)
    s.add_argument("slot_id", type=int)
    _add_period_args(s, required=False)

    for name in ("enable", "disable"):
        s = sub.add_parser(name, help=f"{name.capitalize()} a time slot")
        s.add_argument("actuator_id", type=int)
        s.add_argument("slot_id", type=int)

    s = sub.add_parser("set-state", help="Set the target state of a time slot")
    s.add_argument("actuator_id", type=int)
    s.add_argument("slot_id", type=int)
    s.add_argument("state", type=state_arg)

    s = sub.add_parser("add-override", help="Override a time slot on some dates")
    s.add_argument("actuator_id", type=int)
    s.add_argument("slot_id", type=int)
    _add_period_args(s, required=True)

    s = sub.add_parser("remove-override", help="Remove a time override")
    s.add_argument("actuator_id", type=int)
    s.add_argument("slot_id", type=int)
    s.add_argument("override_id", type=int)

    return p


def run(args: argparse.Namespace, client: SchedulerClient) -> str:
    cmd = args.command
    if cmd == "list":
        return render_actuators(client.list_actuators())
    if cmd == "schedule":
        return render_schedule(client.get_schedule(args.actuator_id, args.start, args.days))
    if cmd == "set-default":
        client.set_default_state(args.actuator_id, args.state)
        return "ok"
    if cmd == "add-slot":
        ts_id = client.add_time_slot(args.actuator_id, _period_body(args), args.state, not args.disabled)
        return f"added time slot {ts_id}"
    if cmd == "remove-slot":
        client.remove_time_slot(args.actuator_id, args.slot_id)
        return "ok"
    if cmd == "set-period":
        client.set_time_period(args.actuator_id, args.slot_id, _period_body(args))
        return "ok"
    if cmd in ("enable", "disable"):
        client.set_enabled(args.actuator_id, args.slot_id, cmd == "enable")
        return "ok"
    if cmd == "set-state":
        client.set_state(args.actuator_id, args.slot_id, args.state)
        return "ok"
    if cmd == "add-override":
        override_id = client.add_override(args.actuator_id, args.slot_id, _period_body(args))
        return f"added override {override_id}"
    if cmd == "remove-override":
        client.remove_override(args.actuator_id, args.slot_id, args.override_id)
        return "ok"
    raise ValueError(f"Unknown command: {cmd}")


def main(argv: Optional[Sequence[str]] = None, transport: Optional[httpx.BaseTransport] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-5s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    client = SchedulerClient(args.url, timeout=settings.http_timeout_seconds, transport=transport)
    try:
        print(run(args, client))
    except ApiError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        logger.debug("Request failed", exc_info=True)
        print(f"error: cannot reach {args.url}: {e}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
