#!/usr/bin/env python3
"""Example CLI that pages through a running PDA directory."""

import argparse
import sys

import httpx


def print_entry(entry: dict) -> None:
    print(f"PDA:        {entry['pda']}")
    print(f"Program:    {entry['program_id']}")
    for seed in entry["seeds"]:
        label = "bump" if seed["is_bump"] else f"seed {seed['index']}"
        print(f"  {label:<8} {seed['raw_hex']} ({seed['length']} bytes)")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Query the PDA directory")
    parser.add_argument("--url", default="http://localhost:8000", help="Directory API base URL")
    parser.add_argument("--pda", help="Look up a single PDA")
    parser.add_argument("--program-id", help="List PDAs owned by a program")
    parser.add_argument("--limit", type=int, default=25, help="Page size")
    parser.add_argument("--pages", type=int, default=1, help="Number of pages to fetch")
    parser.add_argument(
        "--cursor",
        action="store_true",
        help="Page with next_cursor instead of offsets",
    )
    args = parser.parse_args()

    body: dict = {"limit": args.limit}
    if args.pda:
        body = {"pda": args.pda}
    elif args.program_id:
        body["program_id"] = args.program_id

    with httpx.Client(base_url=args.url.rstrip("/"), timeout=30) as http:
        for page in range(args.pages):
            resp = http.post("/api/pda/query", json=body)
            if resp.status_code != 200:
                print(f"Error ({resp.status_code}): {resp.json().get('error')}")
                sys.exit(1)
            data = resp.json()

            print(f"=== Page {page + 1} ({data['count']} results) ===")
            for entry in data["results"]:
                print_entry(entry)

            if not data.get("has_next"):
                break
            if args.cursor:
                cursor = data.get("next_cursor") or data["results"][-1]["pda"]
                body = {**body, "cursor": cursor}
                body.pop("offset", None)
            else:
                body = {**body, "offset": data["next_offset"]}

    print("Done.")


if __name__ == "__main__":
    main()
