#!/usr/bin/env python3
import os

import aws_cdk as cdk

from stacks.cognito_user_tracking_stack import CognitoUserTrackingStack

app = cdk.App()

CognitoUserTrackingStack(
    app,
    os.getenv("CDK_STACK_NAME", "CognitoUserTracking"),
    env=cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION"),
    ),
)

app.synth()
