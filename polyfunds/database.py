import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def _connect(db_path: Union[str, Path]) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Union[str, Path]) -> None:
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            create table if not exists ledger_events (
                sequence integer primary key,
                name text not null,
                timestamp integer not null,
                business_id integer,
                account text,
                args text not null
            )
            """
        )
        conn.commit()
    finally:
        conn.close()


def save_events(db_path: Union[str, Path], events: List[Dict[str, Any]]) -> None:
    conn = _connect(db_path)
    try:
        conn.executemany(
            """
            insert into ledger_events (sequence, name, timestamp, business_id, account, args)
            values (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    event["sequence"],
                    event["name"],
                    event["timestamp"],
                    event.get("business_id"),
                    event.get("account"),
                    json.dumps(event["args"]),
                )
                for event in events
            ],
        )
        conn.commit()
    finally:
        conn.close()


def fetch_events(
    db_path: Union[str, Path],
    after: int = 0,
    business_id: Optional[int] = None,
    account: Optional[str] = None,
) -> List[Dict[str, Any]]:
    query = "select sequence, name, timestamp, business_id, account, args from ledger_events where sequence > ?"
    params: List[Any] = [after]
    if business_id is not None:
        query += " and business_id = ?"
        params.append(business_id)
    if account is not None:
        query += " and account = ?"
        params.append(account)
    query += " order by sequence"

    conn = _connect(db_path)
    try:
        rows = conn.execute(query, params).fetchall()
        return [
            {
                "sequence": row["sequence"],
                "name": row["name"],
                "timestamp": row["timestamp"],
                "business_id": row["business_id"],
                "account": row["account"],
                "args": json.loads(row["args"]),
            }
            for row in rows
        ]
    finally:
        conn.close()


def last_sequence(db_path: Union[str, Path]) -> int:
    conn = _connect(db_path)
    try:
        row = conn.execute("select coalesce(max(sequence), 0) from ledger_events").fetchone()
        return row[0]
    finally:
        conn.close()
