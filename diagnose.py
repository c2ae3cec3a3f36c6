"""Diagnostic script to check that the backend can analyze a database end to end.

Usage:
    python diagnose.py path/to/database.db
    python diagnose.py --base-url http://127.0.0.1:8000 path/to/database.db
"""

import argparse
import sys
import time
from datetime import datetime

import requests

BASE_URL = "http://127.0.0.1:8000"
TERMINAL_STATUSES = ("completed", "failed")


def print_header(text):
    print("\n" + "=" * 80)
    print(text)
    print("=" * 80)


def check_health(base_url):
    """Test if backend is running."""
    print_header("TEST 1: Backend Health Check")
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
    except requests.exceptions.ConnectionError:
        print("[FAIL] Cannot connect to backend")
        print(f"  Make sure backend is running on {base_url}")
        print("  Start it with: python -m uvicorn backend.main:app --host 127.0.0.1 --port 8000 --reload")
        return False

    if response.status_code != 200:
        print(f"[FAIL] Backend returned status {response.status_code}")
        return False
    print("[OK] Backend is running")
    print(f"  Response: {response.json()}")
    return True


def start_analysis(base_url, db_path):
    """Start a SQLite analysis job; returns the job id or None."""
    print_header("TEST 2: Analysis Start Endpoint")
    try:
        response = requests.post(
            f"{base_url}/api/analysis/start",
            json={"engine": "sqlite", "path": db_path, "write_diagram": True},
            timeout=10,
        )
    except requests.exceptions.RequestException as e:
        print(f"[FAIL] Request failed: {type(e).__name__}: {e}")
        return None

    if response.status_code != 200:
        print(f"[FAIL] Analysis endpoint returned status {response.status_code}")
        print(f"  Response: {response.text[:200]}")
        return None

    data = response.json()
    print("[OK] Analysis started")
    print(f"  Job ID: {data['job_id']}")
    return data["job_id"]


def wait_for_job(base_url, job_id, timeout):
    """Poll the status endpoint until the job finishes; prints new progress events."""
    print_header("TEST 3: Analysis Status")
    deadline = time.time() + timeout
    seen = 0
    while time.time() < deadline:
        response = requests.get(f"{base_url}/api/analysis/status/{job_id}", timeout=10)
        if response.status_code != 200:
            print(f"[FAIL] Status endpoint returned {response.status_code}")
            return None
        data = response.json()
        for event in data["events"][seen:]:
            print(f"  [{event['severity'].upper()}] {event['message']}")
        seen = len(data["events"])
        if data["status"] in TERMINAL_STATUSES:
            if data["status"] == "failed":
                print(f"[FAIL] Job failed: {data['error']['message']}")
            else:
                print("[OK] Job completed")
            return data["status"]
        time.sleep(1)

    print(f"[FAIL] Job did not finish within {timeout} seconds")
    return None


def show_result(base_url, job_id):
    """Fetch and summarize the resolved model."""
    print_header("TEST 4: Analysis Result")
    response = requests.get(f"{base_url}/api/analysis/result/{job_id}", timeout=10)
    if response.status_code != 200:
        print(f"[FAIL] Result endpoint returned status {response.status_code}")
        return False

    data = response.json()
    model = data["model"]
    print(f"  Model: {model['name']}")
    for entity in model["entities"]:
        print(f"  - {entity['name']} ({len(entity['columns'])} columns)")
        for rel in entity["relationships"]:
            print(f"      {rel['name']}: ({rel['from_label']}) -> {rel['to_entity']}")
    unresolved = data["report"]["unresolved"]
    if unresolved:
        print(f"\n  [WARNING] {len(unresolved)} unresolved reference(s)")
    if data.get("diagram_path"):
        print(f"\n  Diagram source: {data['diagram_path']}")
    print("\n[OK] Result endpoint working")
    return True


def main():
    parser = argparse.ArgumentParser(description="Backend diagnostic tool")
    parser.add_argument("db_path", help="SQLite database file readable by the backend")
    parser.add_argument("--base-url", default=BASE_URL)
    parser.add_argument("--timeout", type=float, default=60.0)
    args = parser.parse_args()

    print_header("BACKEND DIAGNOSTIC TOOL")
    print(f"Testing backend at: {args.base_url}")
    print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    results = [("Health Check", check_health(args.base_url))]
    if results[0][1]:
        job_id = start_analysis(args.base_url, args.db_path)
        results.append(("Analysis Start", job_id is not None))
        if job_id:
            status = wait_for_job(args.base_url, job_id, args.timeout)
            results.append(("Analysis Status", status == "completed"))
            if status == "completed":
                results.append(("Analysis Result", show_result(args.base_url, job_id)))

    print_header("SUMMARY")
    passed = sum(1 for _, result in results if result)
    for name, result in results:
        print(f"  {'[PASS]' if result else '[FAIL]'}: {name}")
    print(f"\nResults: {passed}/{len(results)} checks passed")
    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
