"""
Configuration management for the persistence API, identity provider and feed behaviour.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class PersistenceConfig:
    """Configuration for the remote prompt persistence API."""
    base_url: str
    timeout: float
    retry_attempts: int
    retry_delay: float


@dataclass
class CognitoConfig:
    """Configuration for the Amazon Cognito user pool used as identity provider."""
    region: str
    user_pool_id: str
    client_id: str


@dataclass
class FeedConfig:
    """Configuration for feed state handling."""
    notification_expiry_ms: int
    offline_fallback: str  # 'seed' or 'error'


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    persistence: PersistenceConfig
    cognito: CognitoConfig
    feed: FeedConfig
    mcp: MCPConfig


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Persistence API configuration
    persistence_config = PersistenceConfig(base_url=os.getenv('PROMPTFEED_API_URL', 'http://localhost:3000'),
                                           timeout=float(os.getenv('PROMPTFEED_API_TIMEOUT', '10')),
                                           retry_attempts=int(os.getenv('PROMPTFEED_API_RETRY_ATTEMPTS', '3')),
                                           retry_delay=float(os.getenv('PROMPTFEED_API_RETRY_DELAY', '0.5')))

    # Cognito configuration
    cognito_config = CognitoConfig(region=os.getenv('COGNITO_AWS_REGION', 'us-east-1'),
                                   user_pool_id=os.getenv('COGNITO_USER_POOL_ID', ''),
                                   client_id=os.getenv('COGNITO_CLIENT_ID', ''))

    # Feed configuration
    offline_fallback = os.getenv('FEED_OFFLINE_FALLBACK', 'seed').lower()
    if offline_fallback not in ('seed', 'error'):
        raise ValueError(f'FEED_OFFLINE_FALLBACK must be "seed" or "error", got "{offline_fallback}"')
    feed_config = FeedConfig(notification_expiry_ms=int(os.getenv('NOTIFICATION_EXPIRY_MS', '3000')),
                             offline_fallback=offline_fallback)

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'sse'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     persistence=persistence_config,
                     cognito=cognito_config,
                     feed=feed_config,
                     mcp=mcp_config)


# Global configuration instance
config = load_config()
