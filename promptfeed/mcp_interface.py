"""
MCP Interface Layer exposing the prompt feed to agents through fastmcp.
"""
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .models.core import Authenticated, Prompt
from .services.faceting import ALL_CATEGORY, categories, filter_prompts
from .services.feed_client import FeedClient
from .utils.config import config
from .utils.health_check import get_system_info
from .utils.logging_config import get_logger
from .utils.timestamp_utils import relative_time

logger = get_logger(__name__)

# Initialize FastMCP application
mcp = FastMCP('Prompt Feed')
_feed: Optional[FeedClient] = None


async def get_feed() -> FeedClient:
    """Create and start the server's feed client on first use."""
    global _feed
    if _feed is None:
        _feed = FeedClient.create(config)
        await _feed.start()
    return _feed


def _serialize(prompt: Prompt) -> Dict[str, Any]:
    return {
        'id': prompt.id,
        'title': prompt.title,
        'content': prompt.content,
        'category': prompt.category,
        'author': prompt.author_name,
        'posted': relative_time(prompt.created_at),
        'likes': prompt.likes,
        'liked': prompt.liked_by_user,
        'comments': [{
            'user': c.user_name,
            'text': c.text,
            'posted': relative_time(c.created_at)
        } for c in prompt.comments]
    }


def _shown_notifications(feed: FeedClient) -> List[Dict[str, Any]]:
    # Returning a notification to the agent counts as showing it
    items = feed.notifications.items
    for notification in items:
        feed.notifications.mark_visible(notification.id)
    return [{'id': n.id, 'message': n.message, 'kind': n.kind.value} for n in items]


@mcp.tool()
async def list_prompts(search: str = '', category: str = ALL_CATEGORY) -> List[Dict[str, Any]]:
    """List feed prompts, newest first.

    Args:
        search: Case-insensitive text to look for in title and content
        category: Category to restrict to, or 'All'

    Returns:
        List of prompt dictionaries
    """
    feed = await get_feed()
    return [_serialize(p) for p in filter_prompts(feed.store.prompts, search, category)]


@mcp.tool()
async def list_categories() -> List[str]:
    """List the categories present in the feed, led by 'All'."""
    feed = await get_feed()
    return categories(feed.store.prompts)


@mcp.tool()
async def share_prompt(title: str, content: str, category: Optional[str] = None) -> Dict[str, Any]:
    """Share a new prompt as the signed-in user.

    Returns:
        The prompt as stored after server confirmation, or the rejection notifications
    """
    feed = await get_feed()
    mutation = feed.coordinator.share_prompt(title, content, category)
    if mutation is None:
        return {'shared': False, 'notifications': _shown_notifications(feed)}

    await mutation.confirmation
    if mutation.reconciled is None:
        return {'shared': False, 'notifications': _shown_notifications(feed)}
    return {'shared': True, 'prompt': _serialize(mutation.reconciled)}


@mcp.tool()
async def delete_prompt(prompt_id: str) -> Dict[str, Any]:
    """Delete one of the signed-in user's prompts."""
    feed = await get_feed()
    mutation = feed.coordinator.delete_prompt(prompt_id)
    if mutation is not None:
        await mutation.confirmation
    return {'deleted': feed.store.get(prompt_id) is None, 'notifications': _shown_notifications(feed)}


@mcp.tool()
async def like_prompt(prompt_id: str) -> Dict[str, Any]:
    """Toggle the signed-in user's like on a prompt."""
    feed = await get_feed()
    feed.coordinator.toggle_like(prompt_id)
    prompt = feed.store.get(prompt_id)
    return {'prompt': _serialize(prompt) if prompt else None, 'notifications': _shown_notifications(feed)}


@mcp.tool()
async def comment_on_prompt(prompt_id: str, text: str) -> Dict[str, Any]:
    """Add a comment to a prompt as the signed-in user."""
    feed = await get_feed()
    mutation = feed.coordinator.add_comment(prompt_id, text)
    return {'commented': mutation is not None, 'notifications': _shown_notifications(feed)}


@mcp.tool()
async def sign_in(username: str, password: str) -> Dict[str, Any]:
    """Sign in to the feed with user-pool credentials."""
    feed = await get_feed()
    ok = feed.sign_in(username, password)
    identity = feed.session.current()
    return {
        'signed_in': ok,
        'user': identity.display_name if isinstance(identity, Authenticated) else None,
        'notifications': _shown_notifications(feed)
    }


@mcp.tool()
async def sign_out() -> List[Dict[str, Any]]:
    """Sign out of the feed."""
    feed = await get_feed()
    feed.sign_out()
    return _shown_notifications(feed)


@mcp.tool()
async def profile() -> Dict[str, Any]:
    """Post and like counts of the signed-in user."""
    feed = await get_feed()
    stats = feed.profile()
    identity = feed.session.current()
    return {
        'user': identity.display_name if isinstance(identity, Authenticated) else None,
        'email': identity.email if isinstance(identity, Authenticated) else None,
        'posts': stats.posts,
        'likes_received': stats.likes_received
    }


@mcp.tool()
async def get_notifications() -> List[Dict[str, Any]]:
    """Return pending notifications and start their expiry now that they have been shown."""
    feed = await get_feed()
    return _shown_notifications(feed)


@mcp.tool()
async def dismiss_notification(notification_id: int) -> bool:
    """Dismiss a notification before it expires."""
    feed = await get_feed()
    return feed.notifications.remove(notification_id)


@mcp.tool()
def health() -> Dict[str, Any]:
    """Report configuration and health of the external services."""
    return get_system_info(config)


if __name__ == '__main__':
    transport = config.mcp.transport
    host = config.mcp.host
    port = config.mcp.port
    mcp.run(transport=transport, host=host, port=port)
