#!/usr/bin/env python3
"""
Terminal version of the live statistics screen: logs in, then polls
/api/live on a fixed interval and prints progress and who is being judged.

  HIFZ_URL=http://127.0.0.1:5000 HIFZ_USER=screen HIFZ_PASS=... python scripts/live_monitor.py
"""
import os, sys, time, signal
import requests

# ----------------- Config (via env) -----------------
BASE_URL    = os.getenv("HIFZ_URL", "http://127.0.0.1:5000").rstrip("/")
USERNAME    = os.getenv("HIFZ_USER", "screen")
PASSWORD    = os.getenv("HIFZ_PASS", "")
GENDER      = os.getenv("LIVE_GENDER", "all")                 # all | male | female
INTERVAL_S  = float(os.getenv("LIVE_REFRESH_SECONDS", "0"))   # 0 -> use refresh_seconds from the server
BACKOFF_0   = float(os.getenv("BACKOFF_START", "0.5"))        # initial backoff when a poll fails
BACKOFF_MAX = float(os.getenv("BACKOFF_MAX", "30"))           # max backoff cap
HTTP_TIMEOUT= float(os.getenv("HTTP_TIMEOUT", "5"))
DEBUG       = os.getenv("DEBUG", "0") == "1"

running = True
def _stop(*_):
    global running
    running = False

signal.signal(signal.SIGINT, _stop)
signal.signal(signal.SIGTERM, _stop)

# ----------------- Helpers -----------------
def dlog(msg: str):
    if DEBUG:
        print(msg, flush=True)

def login(session: requests.Session) -> None:
    resp = session.post(
        f"{BASE_URL}/api/auth/login",
        json={"username": USERNAME, "password": PASSWORD},
        timeout=HTTP_TIMEOUT,
    )
    resp.raise_for_status()
    print(f"[live] signed in as {USERNAME}", flush=True)

def render(snapshot: dict) -> str:
    s = snapshot.get("stats") or {}
    lines = [
        f"[live] {time.strftime('%H:%M:%S')}  gender={snapshot.get('gender')}  "
        f"progress={snapshot.get('progress')}%  "
        f"evaluated={s.get('evaluated')}/{s.get('total')}  waiting={s.get('waiting')}  "
        f"today={s.get('evaluations_today')}",
    ]
    ms = snapshot.get("milestone")
    if ms:
        lines.append(f"       {ms.get('message')}")
    for level, row in (snapshot.get("active") or {}).items():
        lines.append(f"       {level.split(':')[0]}: {row.get('competitor_name')}")
    return "\n".join(lines)

# ----------------- Main -----------------
def run():
    print(f"[live] polling {BASE_URL}/api/live?gender={GENDER}", flush=True)
    backoff = BACKOFF_0
    session = requests.Session()
    logged_in = False

    while running:
        try:
            if not logged_in:
                login(session)
                logged_in = True

            resp = session.get(f"{BASE_URL}/api/live", params={"gender": GENDER}, timeout=HTTP_TIMEOUT)
            if resp.status_code == 401:
                # session expired; sign in again on the next pass
                logged_in = False
                dlog(f"[live] 401, re-login in {min(backoff, BACKOFF_MAX)}s")
                time.sleep(min(backoff, BACKOFF_MAX))
                backoff = min(backoff * 2, BACKOFF_MAX)
                continue
            resp.raise_for_status()
            snapshot = resp.json()
            print(render(snapshot), flush=True)
            backoff = BACKOFF_0  # reset backoff on success

            interval = INTERVAL_S or float(snapshot.get("refresh_seconds") or 5)
            dlog(f"[live] sleeping {interval}s")
            time.sleep(interval)

        except requests.RequestException as e:
            if not running:
                break
            print(f"[live] poll error: {e} (retrying in {min(backoff, BACKOFF_MAX)}s)", flush=True)
            time.sleep(min(backoff, BACKOFF_MAX))
            backoff = min(backoff * 2, BACKOFF_MAX)

    print("[live] shutting down", flush=True)

if __name__ == "__main__":
    if not PASSWORD:
        sys.exit("HIFZ_PASS is required")
    run()
