#!/usr/bin/env python3
"""
Acorn Pups Database CDK App
===========================
DynamoDB tables for the Acorn Pups device-management backend, plus the
Parameter Store entries other repos use to find them.

Stack dependency order:
  acorn-pups-db-<env>-dynamodb → acorn-pups-db-<env>-monitoring

Run:
  cdk deploy --all                       # dev
  cdk deploy --all -c environment=prod   # prod
"""
import os

import aws_cdk as cdk

from acorn_pups_db.app import build_app

app = cdk.App()

env = cdk.Environment(
    account=os.environ.get("CDK_DEFAULT_ACCOUNT") or app.node.try_get_context("account"),
    region=os.environ.get("CDK_DEFAULT_REGION") or app.node.try_get_context("region") or "us-east-1",
)

build_app(app, app.node.try_get_context("environment") or "dev", env=env)

app.synth()
