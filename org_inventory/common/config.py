#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from org_inventory.common.regions import validate_region

DEFAULT_CONFIG_PATH = os.path.join("config", "default.json")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class InventoryConfig:
    region: str
    organization_role: str
    master_account_id: Optional[str] = None


def _lookup(raw: Dict[str, Any], key: str) -> Optional[str]:
    # JSON keys match case-insensitively: "region" and "Region" are the same field
    for k, v in raw.items():
        if k.lower() == key.lower():
            if v is None:
                return None
            return str(v).strip() or None
    return None


def parse_config(raw: Dict[str, Any]) -> InventoryConfig:
    if not isinstance(raw, dict):
        raise ConfigError("config must be a JSON object")

    region = _lookup(raw, "region") or os.getenv("AWS_DEFAULT_REGION")
    try:
        region = validate_region(region or "")
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    role = _lookup(raw, "organizationRole")
    if not role:
        raise ConfigError("organizationRole is required and must be a non-empty string")

    return InventoryConfig(
        region=region,
        organization_role=role,
        master_account_id=_lookup(raw, "masterAccountID"),
    )


def load_config(path: str = DEFAULT_CONFIG_PATH) -> InventoryConfig:
    """Read the JSON config file. Raises ConfigError on bad content, OSError if unreadable."""
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{path}: invalid JSON ({exc})") from exc
    return parse_config(raw)
