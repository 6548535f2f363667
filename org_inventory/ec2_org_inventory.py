#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
EC2 Inventory – whole AWS Organization
--------------------------------------
Lists every account of the organization, assumes the organization role in each
one and exports all EC2 instances of the configured region to a single CSV.

Config (config/default.json):
  {"region": "eu-west-1", "organizationRole": "OrganizationAccountAccessRole", "masterAccountID": "111111111111"}

Dependencies:
  pip install boto3 python-dateutil

Minimal permissions:
  management account: organizations:ListAccounts, sts:AssumeRole
  member accounts (organizationRole): ec2:DescribeInstances

Exit codes: 0 ok, 1 report written but some accounts failed, 2 fatal.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, ProfileNotFound

from org_inventory.accounts import list_accounts, organization_client
from org_inventory.common.aws_common import CredentialResolver, session_for_profile, sts_whoami
from org_inventory.common.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from org_inventory.instances import AccountCollectionError, collect_all
from org_inventory.report import DEFAULT_OUTPUT, failure_summary, write_report

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="EC2 inventory across all accounts of an AWS Organization")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"JSON config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--output", default=DEFAULT_OUTPUT, help=f"Output file (default: {DEFAULT_OUTPUT})")
    p.add_argument("--format", choices=["csv", "json"], default="csv", help="Output format.")
    p.add_argument("--profile", default=os.getenv("AWS_PROFILE"), help="AWS profile name (overrides environment)")
    p.add_argument("--fail-fast", action="store_true", help="Abort the whole run on the first account failure")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def main(args: Optional[Sequence[str]] = None) -> int:
    parsed = parse_args(args)
    logging.basicConfig(level=getattr(logging, parsed.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_config(parsed.config)
    except (ConfigError, OSError) as exc:
        print(f"ERROR: cannot load config '{parsed.config}': {exc}", file=sys.stderr)
        return 2

    try:
        session = session_for_profile(parsed.profile)
        account, caller = sts_whoami(session)
    except ProfileNotFound as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except NoCredentialsError:
        print("ERROR: No AWS credentials/session. Run: aws sso login --profile <name>", file=sys.stderr)
        return 2
    except (ClientError, BotoCoreError) as exc:
        print(f"ERROR: STS whoami failed: {exc}", file=sys.stderr)
        return 2
    print(f"# Caller:  {caller}")
    print(f"# Account: {account}")

    resolver = CredentialResolver(session)

    try:
        accounts = list_accounts(organization_client(resolver, cfg))
    except (ClientError, BotoCoreError) as exc:
        LOGGER.error("Could not retrieve account list: %s", exc)
        return 2

    try:
        records, results = collect_all(resolver, cfg, accounts, fail_fast=parsed.fail_fast)
    except AccountCollectionError as exc:
        LOGGER.error("Could not retrieve the EC2s: %s", exc)
        return 2

    print("Creating the report...")
    try:
        count = write_report(parsed.output, records, parsed.format)
    except OSError as exc:
        LOGGER.error("Cannot write to file %s: %s", parsed.output, exc)
        return 2

    failed = failure_summary(results)
    print("\n# SUMMARY")
    print(f"# Region:   {cfg.region}")
    print(f"# Accounts: {len(results)} ({len(failed)} failed)")
    print(f"# Total instances: {count}")
    print(f"# File written: {parsed.output}")
    for name, acct_id, reason in failed:
        print(f"# FAILED | {name} | {acct_id} | {reason}", file=sys.stderr)

    return 1 if failed else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
