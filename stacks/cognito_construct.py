from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    aws_cognito as cognito,
    aws_iam as iam,
    aws_s3 as s3,
)
from constructs import Construct

COGNITO_IDENTITY_PRINCIPAL = "cognito-identity.amazonaws.com"


def _identity_pool_principal(identity_pool_id: str, amr: str) -> iam.FederatedPrincipal:
    return iam.FederatedPrincipal(
        COGNITO_IDENTITY_PRINCIPAL,
        conditions={
            "StringEquals": {"cognito-identity.amazonaws.com:aud": identity_pool_id},
            "ForAnyValue:StringLike": {"cognito-identity.amazonaws.com:amr": amr},
        },
        assume_role_action="sts:AssumeRoleWithWebIdentity",
    )


class CognitoConstruct(Construct):
    """
    User pool with hosted UI (authorization code grant only) and an identity pool that
    maps authenticated users to a role allowed to put objects into the upload bucket.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        project_name: str,
        domain_name: str,
        hosted_ui_redirect_url: str,
        upload_bucket: s3.IBucket,
    ) -> None:
        super().__init__(scope, construct_id)

        self.user_pool = cognito.UserPool(
            self,
            "cognito-user-pool",
            user_pool_name=f"{project_name}-user-pool",
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            auto_verify=cognito.AutoVerifiedAttrs(email=True, phone=False),
            enable_sms_role=False,
            password_policy=cognito.PasswordPolicy(
                min_length=8,
                require_digits=True,
                require_lowercase=True,
                require_symbols=True,
                require_uppercase=True,
                temp_password_validity=Duration.days(7),
            ),
            removal_policy=RemovalPolicy.DESTROY,
            self_sign_up_enabled=False,
            sign_in_aliases=cognito.SignInAliases(username=True, email=True),
            sign_in_case_sensitive=False,
            standard_attributes=cognito.StandardAttributes(
                email=cognito.StandardAttribute(mutable=False, required=True),
            ),
        )

        # Hosted UI only: no direct password/SRP flows, public client (no secret)
        self.app_client = cognito.UserPoolClient(
            self,
            "cognito-app-client",
            user_pool=self.user_pool,
            user_pool_client_name=project_name,
            auth_flows=cognito.AuthFlow(
                admin_user_password=False,
                custom=False,
                user_password=False,
                user_srp=False,
            ),
            generate_secret=False,
            prevent_user_existence_errors=True,
            supported_identity_providers=[cognito.UserPoolClientIdentityProvider.COGNITO],
            o_auth=cognito.OAuthSettings(
                callback_urls=[hosted_ui_redirect_url],
                logout_urls=[hosted_ui_redirect_url],
                flows=cognito.OAuthFlows(
                    authorization_code_grant=True,
                    implicit_code_grant=False,
                    client_credentials=False,
                ),
                scopes=[
                    cognito.OAuthScope.OPENID,
                    cognito.OAuthScope.EMAIL,
                    cognito.OAuthScope.PROFILE,
                ],
            ),
        )

        self.domain = self.user_pool.add_domain(
            "cognito-domain",
            cognito_domain=cognito.CognitoDomainOptions(domain_prefix=domain_name),
        )

        self.identity_pool = cognito.CfnIdentityPool(
            self,
            "cognito-id-pool",
            identity_pool_name=f"{project_name}-id-pool",
            allow_classic_flow=True,
            allow_unauthenticated_identities=False,
            cognito_identity_providers=[
                cognito.CfnIdentityPool.CognitoIdentityProviderProperty(
                    client_id=self.app_client.user_pool_client_id,
                    provider_name=self.user_pool.user_pool_provider_name,
                )
            ],
        )

        self.authenticated_role = iam.Role(
            self,
            "idp-authenticated-role",
            role_name=f"{project_name}-idp-auth-role",
            assumed_by=_identity_pool_principal(self.identity_pool.ref, "authenticated"),
            description="Cognito identity pool authenticated role",
            inline_policies={
                "policy": iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=["cognito-identity:*"],
                            resources=["*"],
                        ),
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=["s3:PutObject"],
                            resources=[upload_bucket.arn_for_objects("*")],
                        ),
                    ]
                )
            },
        )

        # No permissions; required by the role attachment
        self.unauthenticated_role = iam.Role(
            self,
            "idp-unauthenticated-role",
            role_name=f"{project_name}-idp-unauth-role",
            assumed_by=_identity_pool_principal(self.identity_pool.ref, "unauthenticated"),
            description="Cognito identity pool unauthenticated role",
        )

        cognito.CfnIdentityPoolRoleAttachment(
            self,
            "cognito-id-pool-role-attachment",
            identity_pool_id=self.identity_pool.ref,
            roles={
                "authenticated": self.authenticated_role.role_arn,
                "unauthenticated": self.unauthenticated_role.role_arn,
            },
        )

        CfnOutput(
            self,
            "output-User-Pool-Id",
            description="User Pool ID",
            value=self.user_pool.user_pool_id,
        )
        CfnOutput(
            self,
            "output-identity-pool-id",
            description="Identity Pool ID",
            value=self.identity_pool.ref,
        )
        CfnOutput(
            self,
            "output-user-pool-client-id",
            description="User Pool Client ID",
            value=self.app_client.user_pool_client_id,
        )
        CfnOutput(
            self,
            "output-domain-name",
            description="Cognito Domain Name",
            value=self.domain.domain_name,
        )
