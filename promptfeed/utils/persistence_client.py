"""
REST client for the prompt persistence API with retry logic and error handling.
"""

import asyncio
import random
import time
from typing import Any, Dict, List, Optional, Protocol

import requests

from ..models.core import Prompt
from .config import PersistenceConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class PersistenceError(Exception):
    """Custom exception for persistence API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceAPI(Protocol):
    """Minimal contract the feed needs from the persistence service."""

    async def list_prompts(self) -> List[Prompt]:
        ...

    async def create_prompt(self, title: str, content: str, category: Optional[str]) -> Prompt:
        ...

    async def delete_prompt(self, prompt_id: str) -> None:
        ...


class PersistenceClient:
    """HTTP client for `/api/prompts`.

    Requests are blocking `requests` calls; the async methods push them onto a
    worker thread so the event loop keeps serving local mutations meanwhile.
    """

    def __init__(self, config: PersistenceConfig, session: Optional[requests.Session] = None):
        """
        Initialize persistence client.

        Args:
            config: PersistenceConfig instance with connection parameters
            session: Optional pre-built requests session
        """
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        logger.info(f'Initialized persistence client for: {self.base_url}')

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Perform an HTTP request with retries on transport errors and 5xx responses.

        Returns:
            Decoded JSON body

        Raises:
            PersistenceError: On 4xx responses or when all retry attempts fail
        """
        url = f'{self.base_url}{path}'
        last_error = None

        for attempt in range(self.config.retry_attempts):
            logger.debug(f'{method} {url} attempt {attempt + 1}/{self.config.retry_attempts}')
            try:
                response = self.session.request(method, url, json=payload, timeout=self.config.timeout)
            except requests.RequestException as e:
                last_error = PersistenceError(f'{method} {path} failed: {e}')
            else:
                if response.status_code < 400:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise PersistenceError(f'Invalid JSON from {method} {path}: {e}')

                message = self._error_message(response)
                if response.status_code < 500:
                    raise PersistenceError(message, status_code=response.status_code)
                last_error = PersistenceError(message, status_code=response.status_code)

            logger.warning(f'{method} {path} attempt {attempt + 1}/{self.config.retry_attempts} failed: {last_error}')
            if attempt < self.config.retry_attempts - 1:
                # Exponential backoff with jitter
                delay = self.config.retry_delay * (2**attempt) + random.uniform(0, self.config.retry_delay)
                time.sleep(delay)

        raise PersistenceError(f'{method} {path} failed after {self.config.retry_attempts} attempts: {last_error}',
                               status_code=getattr(last_error, 'status_code', None))

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get('error'):
            return f"HTTP {response.status_code}: {body['error']}"
        return f'HTTP {response.status_code}'

    def list_prompts_sync(self) -> List[Prompt]:
        records = self._request('GET', '/api/prompts')
        if not isinstance(records, list):
            raise PersistenceError(f'Expected a list of prompts, got {type(records).__name__}')
        try:
            return [Prompt.from_record(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f'Malformed prompt record: {e}')

    def create_prompt_sync(self, title: str, content: str, category: Optional[str]) -> Prompt:
        record = self._request('POST', '/api/prompts', {'title': title, 'content': content, 'category': category})
        try:
            return Prompt.from_record(record)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f'Malformed prompt record: {e}')

    def delete_prompt_sync(self, prompt_id: str) -> None:
        body = self._request('DELETE', f'/api/prompts/{prompt_id}')
        if not (isinstance(body, dict) and body.get('success')):
            raise PersistenceError(f'Delete of prompt {prompt_id} was not acknowledged')

    async def list_prompts(self) -> List[Prompt]:
        return await asyncio.to_thread(self.list_prompts_sync)

    async def create_prompt(self, title: str, content: str, category: Optional[str]) -> Prompt:
        return await asyncio.to_thread(self.create_prompt_sync, title, content, category)

    async def delete_prompt(self, prompt_id: str) -> None:
        await asyncio.to_thread(self.delete_prompt_sync, prompt_id)

    def health_check(self) -> bool:
        """
        Perform a health check against the list endpoint.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            self.list_prompts_sync()
            return True
        except Exception as e:
            logger.error(f'Persistence API health check failed: {e}')
            return False
