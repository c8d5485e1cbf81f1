#!/usr/bin/env python3
"""
Bulk-load vibration readings from a CSV file through the REST API.

CSV structure: unit, equipment, date, one column per parameter id (V1, GV1,
H1, ...), optional notes. Empty parameter cells are left out of the reading.
"""

import argparse
import csv
import sys
from typing import Dict, Iterable, List, Tuple

import requests

from vibrate_monitor.core.constants import PARAMETERS_BY_ID

API_BASE = "http://localhost:5000"
REQUIRED_COLUMNS = ("unit", "equipment", "date")


def parse_readings_csv(lines: Iterable[str]) -> Tuple[List[Dict], List[str]]:
    """
    Turn CSV rows into POST /api/data payloads.

    Returns:
        (payloads, problems) where problems name the skipped rows
    """
    reader = csv.DictReader(lines)
    payloads = []
    problems = []

    headers = [h.strip() for h in (reader.fieldnames or [])]
    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if missing:
        return [], [f"Missing columns: {', '.join(missing)}"]

    for row_num, row in enumerate(reader, start=2):
        row = {(k or "").strip(): (v or "").strip() for k, v in row.items()}
        if not all(row.get(c) for c in REQUIRED_COLUMNS):
            problems.append(f"Row {row_num}: missing unit, equipment or date")
            continue

        parameters = {}
        for column, value in row.items():
            if column in PARAMETERS_BY_ID and value != "":
                try:
                    parameters[column] = float(value)
                except ValueError:
                    # left as text so the server reports it with the rest
                    parameters[column] = value

        if not parameters:
            problems.append(f"Row {row_num}: no parameter values")
            continue

        payloads.append({
            "unit": row["unit"],
            "equipment": row["equipment"],
            "date": row["date"],
            "parameters": parameters,
            "notes": row.get("notes", ""),
        })

    return payloads, problems


def login(api_base: str, email: str, password: str) -> str:
    response = requests.post(
        f"{api_base}/api/auth/login",
        json={"email": email, "password": password},
        timeout=10
    )
    response.raise_for_status()
    return response.json()["token"]


def upload_reading(api_base: str, token: str, payload: Dict) -> Tuple[bool, str]:
    response = requests.post(
        f"{api_base}/api/data",
        json=payload,
        headers={"Authorization": f"Bearer {token}"},
        timeout=10
    )
    if response.ok:
        return True, response.json().get("message", "")
    body = response.json() if response.headers.get("content-type", "").startswith("application/json") else {}
    details = "; ".join(body.get("details", []))
    return False, f"{body.get('error', response.status_code)} {details}".strip()


def main(argv=None) -> bool:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("csv_path")
    parser.add_argument("--api", default=API_BASE)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    print(f"📖 Reading {args.csv_path}...")
    with open(args.csv_path, "r", encoding="utf-8", newline="") as f:
        payloads, problems = parse_readings_csv(f)

    for problem in problems:
        print(f"⚠️  {problem}")
    print(f"✅ Parsed {len(payloads)} readings")

    try:
        token = login(args.api, args.email, args.password)
    except requests.RequestException as e:
        print(f"❌ Login failed at {args.api}: {e}")
        return False

    success_count = 0
    fail_count = 0
    for payload in payloads:
        key = f"{payload['unit']}/{payload['equipment']}/{payload['date']}"
        try:
            ok, message = upload_reading(args.api, token, payload)
        except requests.RequestException as e:
            ok, message = False, str(e)
        if ok:
            success_count += 1
        else:
            fail_count += 1
            print(f"  ❌ {key}: {message}")

    print()
    print("=" * 70)
    print("📊 IMPORT SUMMARY")
    print("=" * 70)
    print(f"Readings in CSV:     {len(payloads)}")
    print(f"Saved:               {success_count}")
    print(f"Rejected:            {fail_count}")

    return fail_count == 0 and success_count > 0


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
