from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from org_inventory.common.config import InventoryConfig

LAUNCH_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
LAUNCH_TIME_ISO = "2024-01-02T03:04:05Z"


def make_instance(instance_id: str = "i-abc123", **overrides: Any) -> Dict[str, Any]:
    inst: Dict[str, Any] = {
        "InstanceId": instance_id,
        "InstanceType": "t3.micro",
        "ImageId": "ami-0123456789",
        "State": {"Code": 16, "Name": "running"},
        "LaunchTime": LAUNCH_TIME,
    }
    inst.update(overrides)
    return inst


def reservations(*instances: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One DescribeInstances page with every instance in its own reservation."""
    return [{"Reservations": [{"ReservationId": f"r-{i}", "Instances": [inst]} for i, inst in enumerate(instances)]}]


def client_error(code: str = "AccessDenied", operation: str = "DescribeInstances") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "not allowed"}}, operation)


class FakeResolver:
    """Stands in for CredentialResolver: hands out mocked ec2/organizations clients."""

    def __init__(
        self,
        pages_by_account: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        org_pages: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.pages_by_account = pages_by_account or {}
        self.errors = errors or {}
        self.org_pages = org_pages or [{"Accounts": []}]
        self.calls: List[tuple] = []

    def client(self, service, region, account_id=None, role_name=None):
        self.calls.append((service, region, account_id, role_name))
        if service == "organizations":
            org = MagicMock()
            org.list_accounts.side_effect = list(self.org_pages)
            return org
        ec2 = MagicMock()
        paginator = ec2.get_paginator.return_value
        if account_id in self.errors:
            paginator.paginate.side_effect = self.errors[account_id]
        else:
            paginator.paginate.return_value = self.pages_by_account.get(account_id, [{"Reservations": []}])
        return ec2


@pytest.fixture
def cfg() -> InventoryConfig:
    return InventoryConfig(region="us-east-1", organization_role="OrgReadRole", master_account_id="000000000000")


@pytest.fixture
def sts_session():
    session = MagicMock()
    sts = MagicMock()
    sts.assume_role.return_value = {
        "Credentials": {
            "AccessKeyId": "ASIATESTACCESSKEY",
            "SecretAccessKey": "test-secret",
            "SessionToken": "test-token",
            "Expiration": LAUNCH_TIME,
        }
    }
    session.client.return_value = sts
    return session, sts
