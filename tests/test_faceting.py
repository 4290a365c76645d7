"""
Faceting and search tests.
"""

from conftest import ALICE, BOB, make_prompt
from promptfeed.models.core import ANONYMOUS
from promptfeed.services.entity_store import EntityStore
from promptfeed.services.faceting import ALL_CATEGORY, FeedView, categories, filter_prompts, profile_stats


def sample_prompts():
    return [
        make_prompt('1', title='Midjourney Photorealism', content='Hyper realistic photo', category='Art'),
        make_prompt('2', title='Python Debugger', content='Act as a python expert', category='Code'),
        make_prompt('3', title='SQL Tuner', content='Explain this query plan', category='Code'),
        make_prompt('4', title='Untagged', content='No category here', category=None),
    ]


class TestCategories:

    def test_all_leads_distinct_categories_in_first_seen_order(self):
        assert categories(sample_prompts()) == ['All', 'Art', 'Code']

    def test_empty_store_has_only_all(self):
        assert categories([]) == [ALL_CATEGORY]

    def test_empty_string_category_is_skipped(self):
        assert categories([make_prompt('1', category='')]) == ['All']


class TestFilter:

    def test_identity_filter_returns_everything_in_order(self):
        prompts = sample_prompts()
        assert filter_prompts(prompts, '', 'All') == prompts

    def test_category_filter(self):
        prompts = [make_prompt('1', category='Art'), make_prompt('2', category='Code')]
        assert [p.id for p in filter_prompts(prompts, '', 'Code')] == ['2']

    def test_search_is_case_insensitive_over_title_and_content(self):
        prompts = sample_prompts()
        assert [p.id for p in filter_prompts(prompts, 'PYTHON', 'All')] == ['2']
        assert [p.id for p in filter_prompts(prompts, 'query', 'All')] == ['3']

    def test_search_spans_title_content_boundary(self):
        prompt = make_prompt('1', title='abc', content='def')
        assert filter_prompts([prompt], 'cde', 'All') == [prompt]

    def test_search_and_category_combine(self):
        prompts = sample_prompts()
        assert [p.id for p in filter_prompts(prompts, 'e', 'Code')] == ['2', '3']
        assert filter_prompts(prompts, 'python', 'Art') == []

    def test_unknown_category_matches_nothing(self):
        assert filter_prompts(sample_prompts(), '', 'Music') == []


class TestFeedView:

    def test_view_reflects_latest_store_state(self):
        store = EntityStore(sample_prompts())
        view = FeedView(store)
        view.active_category = 'Code'

        assert [p.id for p in view.visible()] == ['2', '3']

        store.delete('3')
        assert [p.id for p in view.visible()] == ['2']
        assert view.categories() == ['All', 'Art', 'Code']

        view.search_text = 'nothing matches'
        assert view.visible() == []


class TestProfileStats:

    def test_counts_own_posts_and_likes(self):
        prompts = [
            make_prompt('1', likes=3),
            make_prompt('2', likes=4),
            make_prompt('3', author_id=BOB.id, likes=100),
        ]
        stats = profile_stats(prompts, ALICE)
        assert (stats.posts, stats.likes_received) == (2, 7)

    def test_anonymous_has_no_stats(self):
        stats = profile_stats([make_prompt('1', likes=3)], ANONYMOUS)
        assert (stats.posts, stats.likes_received) == (0, 0)
