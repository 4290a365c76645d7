"""
Health check utilities for the feed client's external services.
"""

from typing import Any, Dict, Optional

from .cognito_client import CognitoIdentityProvider
from .config import AppConfig
from .logging_config import get_logger
from .persistence_client import PersistenceClient

logger = get_logger(__name__)


def _config(app_config: Optional[AppConfig]) -> AppConfig:
    if app_config is None:
        from .config import config as default_config
        return default_config
    return app_config


def check_health(app_config: Optional[AppConfig] = None) -> bool:
    """Check the health of all external services.

    Returns:
        True if all services are healthy, False otherwise
    """
    try:
        health_status = get_health_status(app_config)

        all_healthy = all(status.get('healthy', False) for status in health_status.values())

        if all_healthy:
            logger.info('All external services are healthy')
        else:
            logger.warning('Some external services are unhealthy')

        return all_healthy

    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return False


def get_health_status(app_config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get detailed health status of each external service.

    Returns:
        Dictionary with health status of each service
    """
    app_config = _config(app_config)
    health_status = {}

    try:
        persistence = PersistenceClient(app_config.persistence)
        health_status['persistence_api'] = {
            'healthy': persistence.health_check(),
            'service': 'Prompt persistence API',
            'endpoint': app_config.persistence.base_url
        }
    except Exception as e:
        health_status['persistence_api'] = {'healthy': False, 'service': 'Prompt persistence API', 'error': str(e)}

    try:
        cognito = CognitoIdentityProvider(app_config.cognito)
        health_status['identity_provider'] = {
            'healthy': cognito.health_check(),
            'service': 'Amazon Cognito',
            'user_pool': app_config.cognito.user_pool_id
        }
    except Exception as e:
        health_status['identity_provider'] = {'healthy': False, 'service': 'Amazon Cognito', 'error': str(e)}

    return health_status


def get_system_info(app_config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get system information and configuration.

    Returns:
        Dictionary with system information
    """
    app_config = _config(app_config)
    return {
        'service_name': 'PromptFeed',
        'version': '0.1.0',
        'configuration': {
            'environment': app_config.environment,
            'api_url': app_config.persistence.base_url,
            'notification_expiry_ms': app_config.feed.notification_expiry_ms,
            'offline_fallback': app_config.feed.offline_fallback,
            'aws_region': app_config.cognito.region
        },
        'health_status': get_health_status(app_config)
    }
