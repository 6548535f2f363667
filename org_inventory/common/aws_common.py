#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig

LOGGER = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
CFG = BotoConfig(retries={"max_attempts": MAX_ATTEMPTS, "mode": "standard"})

ROLE_SESSION_NAME = "OrgEc2Inventory"

# (region, role_arn)
CacheKey = Tuple[str, str]


def session_for_profile(profile: Optional[str] = None) -> boto3.session.Session:
    return boto3.Session(profile_name=profile) if profile else boto3.Session()


def sts_whoami(session: boto3.session.Session) -> Tuple[str, str]:
    sts = session.client("sts", config=CFG)
    me = sts.get_caller_identity()
    return me["Account"], me["Arn"]


def role_arn(account_id: str, role_name: str) -> str:
    return f"arn:aws:iam::{account_id}:role/{role_name}"


@dataclass(frozen=True)
class ClientConfig:
    """Assumed-role session pinned to one region."""

    region: str
    role_arn: str
    session: boto3.session.Session
    config: BotoConfig

    def client(self, service: str):
        return self.session.client(service, region_name=self.region, config=self.config)


class CredentialResolver:
    """
    Builds per-account, per-region clients by assuming a role from the base session.

    Configs are cached by (region, role ARN) for the lifetime of the resolver; the same
    role used in two regions gets two configs since regional endpoints differ. There is
    no eviction and no expiry tracking.
    """

    def __init__(
        self,
        session: Optional[boto3.session.Session] = None,
        max_attempts: int = MAX_ATTEMPTS,
        session_name: str = ROLE_SESSION_NAME,
    ) -> None:
        self.session = session or boto3.Session()
        self.session_name = session_name
        self.config = BotoConfig(retries={"max_attempts": max_attempts, "mode": "standard"})
        self._configs: Dict[CacheKey, ClientConfig] = {}

    def cached_keys(self) -> List[CacheKey]:
        return list(self._configs)

    def resolve(
        self,
        region: Optional[str],
        account_id: Optional[str],
        role_name: Optional[str],
    ) -> Optional[ClientConfig]:
        # nothing to assume: caller falls back to the base session
        if not region or not account_id or not role_name:
            return None

        arn = role_arn(account_id, role_name)
        key: CacheKey = (region, arn)
        cached = self._configs.get(key)
        if cached is not None:
            return cached

        LOGGER.debug("assuming %s in %s", arn, region)
        resolved = ClientConfig(
            region=region,
            role_arn=arn,
            session=self._assume_role(arn, region),
            config=self.config,
        )
        self._configs[key] = resolved
        return resolved

    def client(
        self,
        service: str,
        region: Optional[str],
        account_id: Optional[str] = None,
        role_name: Optional[str] = None,
    ):
        resolved = self.resolve(region, account_id, role_name)
        if resolved is None:
            return self.session.client(service, region_name=region or None, config=self.config)
        return resolved.client(service)

    def _assume_role(self, arn: str, region: str) -> boto3.session.Session:
        sts = self.session.client("sts", region_name=region, config=self.config)
        resp = sts.assume_role(RoleArn=arn, RoleSessionName=self.session_name)
        creds = resp["Credentials"]
        return boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            region_name=region,
        )
