#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-account EC2 collection.

Each account is collected into its own AccountResult; only collect_all merges
results into the shared instance-id -> record mapping. An account whose role
cannot be assumed or whose DescribeInstances call fails is reported as a failure
instead of stopping the sweep, unless fail_fast is set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from datetime import timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from dateutil import tz

from org_inventory.accounts import Account
from org_inventory.common.aws_common import CredentialResolver
from org_inventory.common.config import InventoryConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_NAME = "N/A"
DEFAULT_PLATFORM = "linux"
DEFAULT_PRIVATE_IP = "N/A"


class AccountCollectionError(RuntimeError):
    def __init__(self, account: Account, reason: str) -> None:
        super().__init__(f"account {account.name} ({account.id}): {reason}")
        self.account = account
        self.reason = reason


def iso(ts) -> str:
    if not ts:
        return ""
    if isinstance(ts, str):
        return ts
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tz.tzutc())
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class InstanceRecord:
    account_name: str
    account_id: str
    instance_name: str
    instance_type: str
    instance_id: str
    image_id: str
    platform: str
    private_ip: str
    state: str
    launch_time: str

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass
class AccountResult:
    account: Account
    records: List[InstanceRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def name_tag(tags: Optional[Sequence[Dict[str, str]]]) -> Optional[str]:
    return next((t.get("Value", "") for t in (tags or []) if t.get("Key") == "Name"), None)


def record_from_instance(account: Account, inst: Dict[str, Any]) -> InstanceRecord:
    # InstanceType/InstanceId/ImageId/State/LaunchTime are always returned by EC2
    name = name_tag(inst.get("Tags"))
    platform = inst.get("Platform")
    private_ip = inst.get("PrivateIpAddress")
    return InstanceRecord(
        account_name=account.name,
        account_id=account.id,
        instance_name=DEFAULT_NAME if name is None else name,
        instance_type=inst["InstanceType"],
        instance_id=inst["InstanceId"],
        image_id=inst["ImageId"],
        platform=DEFAULT_PLATFORM if platform is None else platform,
        private_ip=DEFAULT_PRIVATE_IP if private_ip is None else private_ip,
        state=inst["State"]["Name"],
        launch_time=iso(inst["LaunchTime"]),
    )


def _error_reason(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        err = exc.response.get("Error", {})
        return f"{err.get('Code', 'Unknown')}: {err.get('Message', str(exc))}"
    return f"{type(exc).__name__}: {exc}"


def collect_instances(resolver: CredentialResolver, cfg: InventoryConfig, account: Account) -> AccountResult:
    result = AccountResult(account=account)
    try:
        ec2 = resolver.client("ec2", cfg.region, account.id, cfg.organization_role)
        paginator = ec2.get_paginator("describe_instances")
        for page in paginator.paginate():
            for res in page.get("Reservations", []) or []:
                for inst in res.get("Instances", []) or []:
                    result.records.append(record_from_instance(account, inst))
    except (ClientError, BotoCoreError) as e:
        result.error = _error_reason(e)
        result.records = []
        LOGGER.error("account %s (%s) failed: %s", account.name, account.id, result.error)
        return result

    LOGGER.info("account %s (%s): %d instance(s)", account.name, account.id, len(result.records))
    return result


def collect_all(
    resolver: CredentialResolver,
    cfg: InventoryConfig,
    accounts: Sequence[Account],
    fail_fast: bool = False,
) -> Tuple[Dict[str, InstanceRecord], List[AccountResult]]:
    records: Dict[str, InstanceRecord] = {}
    results: List[AccountResult] = []

    print("Retrieving the instances...")
    for account in accounts:
        result = collect_instances(resolver, cfg, account)
        if not result.ok and fail_fast:
            raise AccountCollectionError(account, result.error or "unknown error")
        results.append(result)
        for rec in result.records:
            if rec.instance_id in records:
                LOGGER.warning("instance %s seen twice; keeping the record from %s", rec.instance_id, account.id)
            records[rec.instance_id] = rec
        if result.ok:
            print(f"Account number {account.id} done")

    print("All the instances from the Organization were retrieved.")
    return records, results
