#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import csv
import json
import os
from typing import Dict, List, Optional, Sequence


def ensure_dir(path: str) -> None:
    # bare file names (e.g. result.csv) land in the working directory
    if path:
        os.makedirs(path, exist_ok=True)


def write_csv(
    path: str,
    rows: List[Dict],
    field_order: Sequence[str],
    header_labels: Optional[Sequence[str]] = None,
) -> None:
    """
    Write dict rows in field_order. header_labels, when given, replaces the
    field names in the header row.
    """
    ensure_dir(os.path.dirname(path))
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(field_order), extrasaction="ignore")
        if header_labels:
            w.writerow(dict(zip(field_order, header_labels)))
        else:
            w.writeheader()
        for r in rows:
            w.writerow(r)


def write_json(path: str, rows: List[Dict]) -> None:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(rows, f, ensure_ascii=False, indent=2)
