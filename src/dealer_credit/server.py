from __future__ import annotations

import argparse
import json
import logging
import math
from dataclasses import asdict
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from dealer_credit.commission.rules import (
    calculate_commission,
    calculate_commission_from_profit,
    calculate_tiered_commission,
)
from dealer_credit.config import load_settings
from dealer_credit.financing.credit import generate_amortization_table
from dealer_credit.leasing.rules import (
    calculate_default_insurance_fee,
    get_available_tenors,
    get_credit_config,
    get_dp_limits,
)
from dealer_credit.logging_config import configure_logging
from dealer_credit.simulation import (
    CreditSimulationRequest,
    CreditValidationError,
    SimulationInputError,
    simulate_credit,
)

logger = logging.getLogger(__name__)


class BadRequest(ValueError):
    pass


def _number(body: dict[str, Any], name: str, default: Any = None) -> Any:
    v = body.get(name, default)
    if v is None:
        raise BadRequest(f"{name} is required")
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise BadRequest(f"{name} must be a number")
    if not math.isfinite(v):
        raise BadRequest(f"{name} must be a finite number")
    return v


def _query_number(query: dict[str, list[str]], name: str, cast: type = float) -> Any:
    values = query.get(name)
    if not values:
        raise BadRequest(f"{name} query parameter is required")
    try:
        v = cast(values[0])
    except ValueError as e:
        raise BadRequest(f"{name} must be a number") from e
    if not math.isfinite(v):
        raise BadRequest(f"{name} must be a finite number")
    return v


def handle_simulate(body: dict[str, Any]) -> dict[str, Any]:
    request = CreditSimulationRequest.from_dict(body)
    sim = simulate_credit(request, with_amortization=bool(body.get("include_amortization")))
    return sim.to_dict()


def handle_amortization(body: dict[str, Any]) -> dict[str, Any]:
    tenor = _number(body, "tenor")
    if not isinstance(tenor, int):
        raise BadRequest("tenor must be an integer")
    rows = generate_amortization_table(_number(body, "principal"), _number(body, "interest_rate"), tenor)
    return {"rows": [asdict(r) for r in rows]}


def handle_commission(body: dict[str, Any]) -> dict[str, Any]:
    selling_price = _number(body, "selling_price")
    out: dict[str, Any] = {
        "commission": calculate_commission(
            selling_price, body.get("payment_method", "cash"), bool(body.get("is_target_met", False))
        ),
        "tiered_commission": calculate_tiered_commission(selling_price),
        "profit_commission": None,
    }
    if body.get("purchase_price") is not None:
        out["profit_commission"] = calculate_commission_from_profit(
            selling_price,
            _number(body, "purchase_price"),
            _number(body, "commission_percentage", 10),
        )
    return out


def handle_leasing_rules(query: dict[str, list[str]]) -> dict[str, Any]:
    price = _query_number(query, "vehicle_price")
    tenor = _query_number(query, "tenor", int)
    category = (query.get("category") or ["motor"])[0]
    condition = (query.get("condition") or ["baru"])[0]
    return {
        "available_tenors": get_available_tenors(category, condition),
        "dp_limits": asdict(get_dp_limits(category, condition)),
        "credit_config": asdict(get_credit_config(price, category, condition, tenor)),
        "default_insurance_fee": calculate_default_insurance_fee(price, category, condition, tenor),
    }


_POST_ROUTES = {
    "/api/credit/simulate": handle_simulate,
    "/api/credit/amortization": handle_amortization,
    "/api/commissions/calculate": handle_commission,
}

_GET_ROUTES = {
    "/api/leasing/rules": handle_leasing_rules,
}


class App(BaseHTTPRequestHandler):
    def _send_json(self, status: int, payload: dict[str, Any]) -> None:
        data = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(data)

    def _read_json_body(self) -> Any:
        n = int(self.headers.get("Content-Length", "0") or "0")
        raw = self.rfile.read(n) if n > 0 else b""
        if not raw:
            return None
        return json.loads(raw.decode("utf-8"))

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.info("%s - %s", self.address_string(), format % args)

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        url = urlparse(self.path)
        handler = _GET_ROUTES.get(url.path.rstrip("/"))
        if handler is None:
            return self._send_json(HTTPStatus.NOT_FOUND, {"error": "Unknown endpoint"})
        try:
            return self._send_json(HTTPStatus.OK, handler(parse_qs(url.query)))
        except ValueError as e:
            return self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid request", "details": [str(e)]})
        except Exception as e:
            logger.exception("GET %s failed", url.path)
            return self._send_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": f"{type(e).__name__}: {e}"})

    def do_POST(self) -> None:  # noqa: N802
        path = urlparse(self.path).path.rstrip("/")
        handler = _POST_ROUTES.get(path)
        try:
            body = self._read_json_body()
            if handler is None:
                return self._send_json(HTTPStatus.NOT_FOUND, {"error": "Unknown endpoint"})
            if not isinstance(body, dict):
                return self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Expected JSON object body"})
            return self._send_json(HTTPStatus.OK, handler(body))
        except json.JSONDecodeError as e:
            return self._send_json(HTTPStatus.BAD_REQUEST, {"error": f"Malformed JSON: {e}"})
        except CreditValidationError as e:
            return self._send_json(
                HTTPStatus.BAD_REQUEST,
                {"error": "Credit validation failed", "details": e.errors, "warnings": e.warnings},
            )
        except SimulationInputError as e:
            return self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Validation failed", "details": e.errors})
        except ValueError as e:
            return self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid request", "details": [str(e)]})
        except Exception as e:
            logger.exception("POST %s failed", path)
            return self._send_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": f"{type(e).__name__}: {e}"})


def make_server(host: str, port: int) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), App)


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    ap = argparse.ArgumentParser(prog="dealer-credit-server")
    ap.add_argument("--host", default=settings.host)
    ap.add_argument("--port", type=int, default=settings.port)
    ap.add_argument("--log-level", default=settings.log_level)
    args = ap.parse_args(argv)

    configure_logging(args.log_level, settings.log_file)
    httpd = make_server(args.host, args.port)
    logger.info("Serving credit API at http://%s:%d/", args.host, httpd.server_address[1])
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
