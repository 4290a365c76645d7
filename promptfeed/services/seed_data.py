"""
Offline seed set shown when the persistence API cannot be reached.

Only used under the 'seed' offline policy; it is never treated as authoritative
and the next successful reload replaces it.
"""

from typing import List

from ..models.core import Authenticated, Identity, Prompt
from ..utils.timestamp_utils import utc_now

DEMO_AUTHOR_ID = 'demo_id'


def offline_prompts(identity: Identity) -> List[Prompt]:
    """Build the seed prompts; the second one belongs to the current user when signed in."""
    now = utc_now()
    if isinstance(identity, Authenticated):
        own_id, own_name = identity.id, identity.display_name
    else:
        own_id, own_name = DEMO_AUTHOR_ID, 'You'

    return [
        Prompt(id='1',
               author_id='other_user',
               author_name='DesignGuru',
               title='Midjourney Photorealism',
               content='Hyper realistic photo of...',
               category='Art',
               created_at=now,
               likes=45),
        Prompt(id='2',
               author_id=own_id,
               author_name=own_name,
               title='Python Debugger',
               content='Act as a python expert...',
               category='Code',
               created_at=now,
               likes=12,
               liked_by_user=True),
    ]
