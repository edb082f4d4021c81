#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLite connector command line

Commands:
  exec                Run one statement that returns no rows (CREATE/INSERT/UPDATE/DELETE/DROP)
  query               Run one SELECT and print the rows; optionally export them to CSV

Notes:
- The database file comes from --db, else CONNECTOR_DB_PATH, else config.yaml, else ./test.sqlite.
- Statements must be terminated by a semicolon. CREATE DATABASE / DROP DATABASE do not exist in SQLite.
- Failures are reported on stderr and the exit status is 1.
"""

import argparse
import logging
import os
import sys

import pandas as pd

from connector import ConnectorConfig, SQLiteConnector, configure_logging, load_config


def make_connector(args) -> SQLiteConnector:
    cfg = load_config(db_path=args.db, cfg_path=args.config)
    return SQLiteConnector(cfg)


def cmd_exec(args) -> int:
    db = make_connector(args)
    if not db.execute_statement(args.sql):
        return 1
    print("OK")
    return 0


def cmd_query(args) -> int:
    db = make_connector(args)
    rows = db.execute_query(args.sql)
    if rows is None:
        return 1
    with rows:
        df = rows.to_dataframe()

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)
    if not df.empty:
        print(df)
    else:
        print("(empty)")

    if args.csv:
        out_dir = os.path.dirname(args.csv)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        df.to_csv(args.csv, index=False, encoding="utf-8-sig")
        print(f"\nCSV exported to {args.csv}")
    return 0


# ---------------- Entry ----------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run single SQL statements against a SQLite file")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--db", default=None, help=f"database file (default {ConnectorConfig().db_path})")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_exec = sub.add_parser("exec", help="run a statement that returns no rows")
    p_exec.add_argument("sql")
    p_exec.set_defaults(func=cmd_exec)

    p_query = sub.add_parser("query", help="run a query and print the rows")
    p_query.add_argument("sql")
    p_query.add_argument("--csv", required=False, help="export rows to this CSV file")
    p_query.set_defaults(func=cmd_query)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
