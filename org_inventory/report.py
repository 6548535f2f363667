#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from typing import Dict, List, Mapping, Tuple

from org_inventory.common.csvio import write_csv, write_json
from org_inventory.instances import AccountResult, InstanceRecord

DEFAULT_OUTPUT = "result.csv"

HEADERS = [
    "Account Name", "Account ID", "Instance Name", "Instance Size", "Instance ID",
    "Image ID", "Platform", "Private IP", "State", "Timestamp",
]
FIELD_ORDER = InstanceRecord.field_names()


def write_report(path: str, records: Mapping[str, InstanceRecord], fmt: str = "csv") -> int:
    """Write one row per record, in mapping order. Returns the row count."""
    rows = [r.as_dict() for r in records.values()]
    if fmt == "csv":
        write_csv(path, rows, FIELD_ORDER, header_labels=HEADERS)
    elif fmt == "json":
        labelled: List[Dict[str, str]] = [
            {label: row[name] for name, label in zip(FIELD_ORDER, HEADERS)} for row in rows
        ]
        write_json(path, labelled)
    else:
        raise ValueError(f"unsupported format: {fmt}")
    return len(rows)


def failure_summary(results: List[AccountResult]) -> List[Tuple[str, str, str]]:
    return [(r.account.name, r.account.id, r.error or "") for r in results if not r.ok]
