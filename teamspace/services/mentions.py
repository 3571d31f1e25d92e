"""Resolve ``@name`` mentions in chat text to user ids."""
import re
from typing import Iterable, List, Optional, Sequence

MENTION_PATTERN = re.compile(r"@(\w+)")


def extract_mention_tokens(content: str) -> List[str]:
    """Lower-cased ``@token`` values in order of appearance."""
    return [match.group(1).lower() for match in MENTION_PATTERN.finditer(content or "")]


def _matches(token: str, user) -> bool:
    name = (user.name or "").lower()
    local_part = (user.email or "").lower().split("@")[0]
    return token in name or token in local_part


def resolve_mention(token: str, users: Sequence) -> Optional[int]:
    """Id of the first user whose name or email local part contains ``token``."""
    for user in users:
        if _matches(token, user):
            return user.id
    return None


def parse_mentions(content: str, users: Iterable) -> List[int]:
    """Distinct ids of the users mentioned in ``content``, first mention first.

    Tokens that match nobody are dropped. When a token matches several users
    the first one in ``users`` wins, so callers should pass a stable ordering.
    """
    users = list(users)
    mentioned: List[int] = []
    for token in extract_mention_tokens(content):
        user_id = resolve_mention(token, users)
        if user_id is not None and user_id not in mentioned:
            mentioned.append(user_id)
    return mentioned
