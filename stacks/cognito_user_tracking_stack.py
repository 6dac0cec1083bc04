from aws_cdk import Stack, Tags
from constructs import Construct

from stacks.cognito_construct import CognitoConstruct
from stacks.s3_construct import UploadBucketConstruct

CONTEXT_KEY = "cognito-user-tracking"
REQUIRED_CONTEXT = ("projectName", "cognitoDomainName", "clientAppUrl")


class CognitoUserTrackingStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        context = self.node.try_get_context(CONTEXT_KEY) or {}
        missing = [key for key in REQUIRED_CONTEXT if not context.get(key)]
        if missing:
            raise ValueError(
                f'You need to configure context parameters. "{CONTEXT_KEY}".'
                f"({', '.join(repr(k) for k in REQUIRED_CONTEXT)}); missing: {', '.join(missing)}"
            )

        project_name = context["projectName"]
        cognito_domain_name = context["cognitoDomainName"]
        client_app_url = context["clientAppUrl"].rstrip("/")

        self.upload_bucket = UploadBucketConstruct(
            self,
            "bucket",
            client_app_url_for_cors=client_app_url,
        )

        self.cognito = CognitoConstruct(
            self,
            "cognito",
            project_name=project_name,
            domain_name=cognito_domain_name,
            hosted_ui_redirect_url=f"{client_app_url}/auth",
            upload_bucket=self.upload_bucket.bucket,
        )

        Tags.of(self).add("project", project_name)
