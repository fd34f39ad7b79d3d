# deployhook/utils/ssm.py
"""Secrets for deployhook kept in AWS SSM Parameter Store.

Only the API token is read from here; everything else comes from the
config file and the environment.
"""
import os

import boto3

_REGION = os.getenv("AWS_DEFAULT_REGION", os.getenv("AWS_REGION", "us-east-1"))
# parameter names are looked up as <prefix><KEY>, e.g. /deployhook/prod/API_TOKEN
_PREFIX = os.getenv("SSM_PARAM_PREFIX", "")


def parameter_name(key: str) -> str:
    return f"{_PREFIX}{key}"


def get_param(key: str, decrypt: bool = True) -> str:
    """Return the value stored for ``key``; boto3/botocore errors propagate."""
    ssm = boto3.client("ssm", region_name=_REGION)
    resp = ssm.get_parameter(Name=parameter_name(key), WithDecryption=decrypt)
    return resp["Parameter"]["Value"]
