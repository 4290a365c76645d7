"""
Amazon Cognito identity provider wrapper with session tracking and change notification.
"""

from typing import Callable, Dict, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..models.core import Authenticated
from .config import CognitoConfig
from .logging_config import get_logger

logger = get_logger(__name__)

SessionListener = Callable[[Optional[Authenticated]], None]


class CognitoError(Exception):
    """Custom exception for Cognito errors."""
    pass


class IdentityProvider(Protocol):
    """Contract the session adapter consumes from an identity provider."""

    def get_current_session(self) -> Optional[Authenticated]:
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        ...

    def sign_in(self, username: str, password: str) -> Authenticated:
        ...

    def sign_out(self) -> None:
        ...


class CognitoIdentityProvider:
    """Cognito user-pool client holding the access token of the signed-in user."""

    def __init__(self, config: CognitoConfig, client=None):
        """
        Initialize Cognito identity provider.

        Args:
            config: CognitoConfig instance with user pool parameters
            client: Optional pre-built boto3 cognito-idp client
        """
        self.config = config
        self.client = client or boto3.client('cognito-idp', region_name=config.region)
        self._access_token: Optional[str] = None
        self._listeners: List[SessionListener] = []

        logger.info(f'Initialized Cognito identity provider for pool: {config.user_pool_id}')

    @staticmethod
    def _to_identity(user: Dict) -> Authenticated:
        attributes = {attr['Name']: attr['Value'] for attr in user.get('UserAttributes', [])}
        email = attributes.get('email')
        return Authenticated(id=attributes.get('sub') or user['Username'],
                             display_name=Authenticated.derive_display_name(attributes.get('name'), email),
                             avatar_url=attributes.get('picture'),
                             email=email)

    def _notify(self, identity: Optional[Authenticated]) -> None:
        for listener in list(self._listeners):
            listener(identity)

    def get_current_session(self) -> Optional[Authenticated]:
        """
        Resolve the identity behind the stored access token.

        Returns:
            The signed-in identity, or None if there is no valid session
        """
        if self._access_token is None:
            return None
        try:
            return self._to_identity(self.client.get_user(AccessToken=self._access_token))
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'NotAuthorizedException':
                logger.info('Cognito session expired')
                self._access_token = None
                return None
            logger.error(f'Cognito get_user failed: {e}')
            raise CognitoError(f'Failed to resolve session: {e}')
        except BotoCoreError as e:
            logger.error(f'Cognito get_user failed: {e}')
            raise CognitoError(f'Failed to resolve session: {e}')

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for sign-in and sign-out events.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, username: str, password: str) -> Authenticated:
        """
        Authenticate with username and password.

        Raises:
            CognitoError: If authentication fails
        """
        try:
            response = self.client.initiate_auth(ClientId=self.config.client_id,
                                                 AuthFlow='USER_PASSWORD_AUTH',
                                                 AuthParameters={
                                                     'USERNAME': username,
                                                     'PASSWORD': password
                                                 })
        except (ClientError, BotoCoreError) as e:
            logger.warning(f'Cognito sign-in failed for {username}: {e}')
            raise CognitoError(f'Sign-in failed: {e}')

        result = response.get('AuthenticationResult')
        if not result:
            # MFA and password-reset challenges are not handled by this client
            raise CognitoError(f"Sign-in requires challenge {response.get('ChallengeName')}")

        self._access_token = result['AccessToken']
        identity = self.get_current_session()
        if identity is None:
            raise CognitoError('Sign-in returned an unusable access token')

        logger.info(f'Signed in as {identity.id}')
        self._notify(identity)
        return identity

    def sign_out(self) -> None:
        """Revoke the current session. Signing out without a session is a no-op."""
        if self._access_token is None:
            return
        try:
            self.client.global_sign_out(AccessToken=self._access_token)
        except (ClientError, BotoCoreError) as e:
            # Local session is dropped regardless
            logger.warning(f'Cognito global sign-out failed: {e}')
        finally:
            self._access_token = None

        logger.info('Signed out')
        self._notify(None)

    def health_check(self) -> bool:
        """
        Check that the configured app client is reachable.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            self.client.describe_user_pool_client(UserPoolId=self.config.user_pool_id,
                                                  ClientId=self.config.client_id)
            return True
        except Exception as e:
            logger.error(f'Cognito health check failed: {e}')
            return False
