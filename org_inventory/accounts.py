#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from org_inventory.common.aws_common import CredentialResolver
from org_inventory.common.config import InventoryConfig

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    name: str
    id: str


def organization_client(resolver: CredentialResolver, cfg: InventoryConfig):
    """
    Organizations client for the management account. Assumes the organization role
    there when masterAccountID is set, otherwise uses the base session as is.
    """
    return resolver.client(
        "organizations",
        cfg.region,
        cfg.master_account_id,
        cfg.organization_role,
    )


def list_accounts(org) -> List[Account]:
    """
    Walk ListAccounts until no NextToken comes back. Accounts keep the order the
    API returns them in. Any API error propagates: a partial list would silently
    under-report.
    """
    accounts: List[Account] = []
    params: Dict[str, Any] = {}
    pages = 0
    while True:
        resp = org.list_accounts(**params)
        pages += 1
        for a in resp.get("Accounts", []) or []:
            accounts.append(Account(name=a["Name"], id=a["Id"]))
        token = resp.get("NextToken")
        if not token:
            break
        params["NextToken"] = token
    LOGGER.info("listed %d accounts in %d page(s)", len(accounts), pages)
    return accounts


def accounts_by_name(accounts: List[Account]) -> Dict[str, str]:
    """name -> id view. Duplicate display names: the last account seen wins."""
    out: Dict[str, str] = {}
    for a in accounts:
        if a.name in out and out[a.name] != a.id:
            LOGGER.warning("duplicate account name %r: %s replaces %s", a.name, a.id, out[a.name])
        out[a.name] = a.id
    return out
