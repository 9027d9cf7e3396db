"""
Concurrency test for the agenda cell editor.

- Uses an ADMIN bearer token (see scripts/seed.py)
- Fires N concurrent POST /api/v1/admin/agenda/cells for the same slot
- Prints the status codes (expect 200 for a single winner, 409 for the others)
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt

import httpx


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser()
    p.add_argument("--base", default="http://localhost:8000")
    p.add_argument("--token", required=True, help="ADMIN access token")
    p.add_argument("--professional-id", required=True)
    p.add_argument("--date", default=None, help="YYYY-MM-DD (default: next Monday)")
    p.add_argument("--time", default="08:00")
    p.add_argument("--room", type=int, default=1)
    p.add_argument("--n", type=int, default=5, help="number of concurrent requests")
    return p.parse_args()


def next_monday() -> str:
    today = dt.date.today()
    return (today + dt.timedelta(days=7 - today.weekday())).isoformat()


async def run():
    args = parse_args()
    headers = {"Authorization": f"Bearer {args.token}"}
    payload = {
        "date": args.date or next_monday(),
        "time": args.time,
        "room": args.room,
        "professional_id": args.professional_id,
        "client_id": "",
        "status": "agendado",
    }

    async with httpx.AsyncClient(timeout=10) as c:

        async def hit(i: int):
            resp = await c.post(
                f"{args.base}/api/v1/admin/agenda/cells", json=payload, headers=headers
            )
            return i, resp.status_code, resp.text[:200]

        results = await asyncio.gather(*(hit(i) for i in range(args.n)))

    print("payload:", payload)
    for i, code, body in results:
        print(f"req#{i}: {code} {body}")
    winners = sum(1 for _, code, _ in results if code == 200)
    print(f"winners: {winners} (expected 1)")


if __name__ == "__main__":
    asyncio.run(run())
