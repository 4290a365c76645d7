"""
Shared fakes and fixtures for the feed tests.

The persistence API, identity provider, clipboard and scheduler are replaced by
small in-memory stand-ins so the state engine can be driven deterministically.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from promptfeed.models.core import Authenticated, Prompt
from promptfeed.services.coordinator import MutationCoordinator
from promptfeed.services.entity_store import EntityStore
from promptfeed.services.feed_client import FeedClient
from promptfeed.services.notification_queue import NotificationQueue
from promptfeed.services.session_adapter import SessionAdapter
from promptfeed.utils.cognito_client import CognitoError
from promptfeed.utils.config import load_config
from promptfeed.utils.persistence_client import PersistenceError
from promptfeed.utils.scheduler import ScheduledTask

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

ALICE = Authenticated(id='alice-id', display_name='Alice', avatar_url=None, email='alice@example.com')
BOB = Authenticated(id='bob-id', display_name='Bob', avatar_url=None, email='bob@example.com')


def make_prompt(prompt_id: str, minutes_ago: int = 0, **overrides) -> Prompt:
    fields = dict(id=prompt_id,
                  author_id=ALICE.id,
                  author_name=ALICE.display_name,
                  title=f'Title {prompt_id}',
                  content=f'Content {prompt_id}',
                  category=None,
                  created_at=BASE_TIME - timedelta(minutes=minutes_ago),
                  likes=0,
                  liked_by_user=False)
    fields.update(overrides)
    return Prompt(**fields)


class FakePersistence:
    """In-memory persistence API with per-operation failures and gates."""

    def __init__(self, prompts: Optional[List[Prompt]] = None):
        self.prompts: List[Prompt] = list(prompts or [])
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[tuple] = []
        self._next_id = 100

    async def _checkpoint(self, operation: str) -> None:
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        if operation in self.failures:
            raise self.failures[operation]

    async def list_prompts(self) -> List[Prompt]:
        self.calls.append(('list', ))
        await self._checkpoint('list')
        return list(self.prompts)

    async def create_prompt(self, title: str, content: str, category: Optional[str]) -> Prompt:
        self.calls.append(('create', title, content, category))
        await self._checkpoint('create')
        self._next_id += 1
        # The server records only what the create endpoint accepts
        prompt = Prompt.from_record({
            'id': self._next_id,
            'title': title,
            'content': content,
            'category': category,
            'created_at': '2025-03-01T12:30:00Z'
        })
        self.prompts.insert(0, prompt)
        return prompt

    async def delete_prompt(self, prompt_id: str) -> None:
        self.calls.append(('delete', prompt_id))
        await self._checkpoint('delete')
        self.prompts = [p for p in self.prompts if p.id != prompt_id]


class FakeIdentityProvider:

    def __init__(self, identity: Optional[Authenticated] = None, users: Optional[Dict[str, Authenticated]] = None):
        self.identity = identity
        self.users = users or {}
        self.listeners = []
        self.session_error: Optional[Exception] = None

    def get_current_session(self) -> Optional[Authenticated]:
        if self.session_error is not None:
            raise self.session_error
        return self.identity

    def subscribe(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, identity: Optional[Authenticated]) -> None:
        self.identity = identity
        for listener in list(self.listeners):
            listener(identity)

    def sign_in(self, username: str, password: str) -> Authenticated:
        user = self.users.get(username)
        if user is None or password != 'secret':
            raise CognitoError('Incorrect username or password')
        self.emit(user)
        return user

    def sign_out(self) -> None:
        self.emit(None)


class FakeClipboard:

    def __init__(self, works: bool = True):
        self.works = works
        self.copied: List[str] = []

    def copy(self, text: str) -> bool:
        if self.works:
            self.copied.append(text)
        return self.works


class ManualScheduler:
    """Scheduler whose clock only moves when the test advances it."""

    def __init__(self):
        self.now = 0.0
        self.tasks: List[tuple] = []

    def schedule(self, delay_seconds: float, callback) -> ScheduledTask:
        task = ScheduledTask(callback)
        self.tasks.append((self.now + delay_seconds, task))
        return task

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for due, task in list(self.tasks):
            if due <= self.now:
                task.run()


class FeedHarness:
    """A coordinator wired to fakes, with shortcuts to every collaborator."""

    def __init__(self, prompts=None, identity=ALICE, offline_fallback='seed'):
        self.api = FakePersistence(prompts)
        self.provider = FakeIdentityProvider(identity, users={'alice': ALICE, 'bob': BOB})
        self.session = SessionAdapter(self.provider)
        self.session.start()
        self.scheduler = ManualScheduler()
        self.notifications = NotificationQueue(self.scheduler, expiry_ms=3000)
        self.store = EntityStore()
        self.store.replace(prompts or [])
        self.clipboard = FakeClipboard()
        self.coordinator = MutationCoordinator(self.store,
                                               self.session,
                                               self.notifications,
                                               self.api,
                                               offline_fallback=offline_fallback,
                                               clipboard=self.clipboard)

    def messages(self, kind=None):
        return [n.message for n in self.notifications.items if kind is None or n.kind.value == kind]


def make_client(prompts=None, identity=None, scheduler=None):
    """A feed client wired to fresh fakes; returns the client, its persistence API and its identity provider."""
    api = FakePersistence(prompts)
    provider = FakeIdentityProvider(identity, users={'alice': ALICE, 'bob': BOB})
    client = FeedClient.create(load_config(),
                               api=api,
                               provider=provider,
                               clipboard=FakeClipboard(),
                               scheduler=scheduler or ManualScheduler())
    return client, api, provider


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def harness():
    return FeedHarness(prompts=[
        make_prompt('1', minutes_ago=5, author_id='other_user', author_name='DesignGuru', category='Art', likes=5),
        make_prompt('2', minutes_ago=10, category='Code', likes=12),
    ])


@pytest.fixture
def persistence_error():
    return PersistenceError('HTTP 500: database unavailable', status_code=500)
