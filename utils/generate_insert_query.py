#!/usr/bin/env python3
"""
Script to generate SQL INSERT queries for the monitors table.

The generated rows point at the local mock server (utils/mock_server.py):
- id is not provided (it's SERIAL)
- url is http://localhost:8080/{uuid4()}, with a few https and unreachable ports mixed in
- check_interval is between 5 and 300 seconds
- owner_email is owner-<n>@example.com

The generated query is written to a file named 'insert_query.sql'.
"""

import argparse
import random
from pathlib import Path
from uuid import uuid4

DEFAULT_ROWS = 500
UNREACHABLE_PROBABILITY = 0.05


def generate_check_interval() -> str:
    """Returns a PostgreSQL interval literal between 5 and 300 seconds."""
    seconds = random.randint(5, 300)
    return f"'{seconds} seconds'::interval"


def generate_url() -> str:
    # Port 9 (discard) is almost never listening, which yields connection-refused probes.
    port = 9 if random.random() < UNREACHABLE_PROBABILITY else 8080
    return f"http://localhost:{port}/{uuid4()}"


def generate_insert_query(rows: int) -> str:
    """
    Builds one multi-row INSERT statement for the monitors table.

    Args:
        rows: Number of monitors to insert.

    Returns:
        str: The SQL text.
    """
    values_list = []
    for n in range(1, rows + 1):
        values_list.append(
            f"('mock-{n}', '{generate_url()}', {generate_check_interval()}, 'owner-{n}@example.com')"
        )

    all_values = ",\n    ".join(values_list)
    return f"""SET search_path TO uptime_monitor;

INSERT INTO monitors (monitor_name, url, check_interval, owner_email)
VALUES
    {all_values};
"""


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate monitors for local load testing.")
    parser.add_argument("-n", "--rows", type=int, default=DEFAULT_ROWS)
    parser.add_argument("-o", "--output", type=Path, default=Path("insert_query.sql"))
    args = parser.parse_args()

    args.output.write_text(generate_insert_query(args.rows))
    print(f"SQL query with {args.rows} rows has been generated and saved to {args.output}")


if __name__ == "__main__":
    main()
