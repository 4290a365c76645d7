"""
Session adapter tests.
"""

import pytest

from conftest import ALICE, BOB, FakeIdentityProvider
from promptfeed.models.core import ANONYMOUS, Anonymous
from promptfeed.services.session_adapter import SessionAdapter
from promptfeed.utils.cognito_client import CognitoError


class TestSessionAdapter:

    def test_starts_anonymous_without_session(self):
        adapter = SessionAdapter(FakeIdentityProvider())
        assert adapter.start() == ANONYMOUS
        assert isinstance(adapter.current(), Anonymous)
        assert adapter.authenticated() is None

    def test_picks_up_existing_session(self):
        adapter = SessionAdapter(FakeIdentityProvider(ALICE))
        adapter.start()
        assert adapter.current() == ALICE
        assert adapter.authenticated() == ALICE

    def test_follows_provider_events(self):
        provider = FakeIdentityProvider()
        adapter = SessionAdapter(provider)
        adapter.start()
        changes = []
        adapter.subscribe(changes.append)

        provider.emit(BOB)
        provider.emit(None)

        assert changes == [BOB, ANONYMOUS]

    def test_repeated_identity_does_not_notify(self):
        provider = FakeIdentityProvider(ALICE)
        adapter = SessionAdapter(provider)
        adapter.start()
        changes = []
        adapter.subscribe(changes.append)

        provider.emit(ALICE)

        assert changes == []

    def test_sign_in_and_out(self):
        provider = FakeIdentityProvider(users={'bob': BOB})
        adapter = SessionAdapter(provider)
        adapter.start()
        changes = []
        adapter.subscribe(changes.append)

        assert adapter.sign_in('bob', 'secret') == BOB
        adapter.sign_out()

        assert changes == [BOB, ANONYMOUS]
        assert adapter.current() == ANONYMOUS

    def test_failed_sign_in_keeps_anonymous(self):
        adapter = SessionAdapter(FakeIdentityProvider(users={'bob': BOB}))
        adapter.start()

        with pytest.raises(CognitoError):
            adapter.sign_in('bob', 'wrong')

        assert adapter.current() == ANONYMOUS

    def test_stop_detaches_from_provider(self):
        provider = FakeIdentityProvider()
        adapter = SessionAdapter(provider)
        adapter.start()
        adapter.stop()

        provider.emit(ALICE)

        assert adapter.current() == ANONYMOUS
