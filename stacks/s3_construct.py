from aws_cdk import CfnOutput, RemovalPolicy, aws_s3 as s3
from constructs import Construct


class UploadBucketConstruct(Construct):
    """Private bucket the browser writes to directly; CORS admits only the client app origin."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        client_app_url_for_cors: str,
    ) -> None:
        super().__init__(scope, construct_id)

        self.bucket = s3.Bucket(
            self,
            "s3-bucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            cors=[
                s3.CorsRule(
                    allowed_headers=["*"],
                    allowed_methods=[
                        s3.HttpMethods.HEAD,
                        s3.HttpMethods.GET,
                        s3.HttpMethods.POST,
                        s3.HttpMethods.PUT,
                        s3.HttpMethods.DELETE,
                    ],
                    allowed_origins=[client_app_url_for_cors],
                    exposed_headers=["ETag"],
                )
            ],
            removal_policy=RemovalPolicy.DESTROY,
        )

        CfnOutput(
            self,
            "output-s3-bucket",
            description="S3 Bucket Name",
            value=self.bucket.bucket_name,
        )
