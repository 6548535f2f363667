#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import re

_REGION_RE = re.compile(r"^[a-z]{2}(-[a-z]+)+-\d+$")


def validate_region(region: str) -> str:
    """
    Validate a single region name (e.g. 'eu-west-1') and return it stripped.
    Only one region per run; no 'all' here.
    """
    if not region or not region.strip():
        raise ValueError("region must be provided (e.g., \"region\": \"eu-west-1\")")
    region = region.strip()
    if not _REGION_RE.match(region):
        raise ValueError(f"invalid region: {region}")
    return region
