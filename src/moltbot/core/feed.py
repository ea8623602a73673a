# SPDX-License-Identifier: MPL-2.0
"""
Append-only feed of attested posts.

The feed is a JSON list of posts in a single file. A missing file is an
empty feed, and so is a file that does not parse: a corrupt feed is
reported in the logs but never aborts a reader. Verification state is
derived on every read and never written back.

``append`` re-reads the file and atomically replaces it with the extended
list; a failed write leaves the previous feed in place. It is not safe
against concurrent writers in other processes.
"""

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from pydantic import ValidationError

from .crypto import PublicKeyLike
from .exceptions import FeedError
from .models import Post, VerifiedPost
from .verification import embedded_key_matches, verify_attestation_object

logger = logging.getLogger(__name__)

EMPTY_FEED_MESSAGE = "No posts in Moltbook."


def verify_post(
    post: Post,
    bot_public_key: Optional[PublicKeyLike] = None,
    require_known_key: bool = False,
) -> bool:
    """Verify a single post.

    Args:
        post: The post to verify
        bot_public_key: Key used when the attestation embeds none
        require_known_key: Also require an embedded key to equal
            ``bot_public_key``, so self-signed posts from other keys fail

    Returns:
        True iff the attestation is valid for the post's prompt and output.
    """
    if require_known_key:
        if bot_public_key is None:
            return False
        if post.attestation.public_key is not None and not embedded_key_matches(post.attestation, bot_public_key):
            logger.debug("Embedded key does not match the known bot key")
            return False
    return verify_attestation_object(post.prompt, post.output, post.attestation, bot_public_key)


class Feed:
    """A JSON-file backed, append-only list of posts."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_raw(self) -> List[Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Feed %s is not valid JSON, treating as empty: %s", self.path, exc)
            return []
        except OSError as exc:
            logger.warning("Feed %s could not be read, treating as empty: %s", self.path, exc)
            return []

        if not isinstance(data, list):
            logger.warning("Feed %s is not a JSON list, treating as empty", self.path)
            return []
        return data

    def load(self) -> List[Post]:
        """Load all well-formed posts in order."""
        posts = []
        for index, entry in enumerate(self._read_raw()):
            try:
                posts.append(Post.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed post %d in %s: %s", index, self.path, exc.error_count())
        return posts

    def append(self, post: Post) -> None:
        """Append ``post`` and persist the feed.

        Only the signed post fields are stored; a ``VerifiedPost`` loses its
        ``verified`` flag.

        Raises:
            FeedError: If the feed file cannot be written.
        """
        entries = self._read_raw()
        entries.append(post.as_post().to_wire())
        tmp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            raise FeedError(f"Error writing feed: {exc}", details={"path": str(self.path)}) from exc
        logger.info("Appended post %d to %s", len(entries), self.path)

    def load_and_verify(
        self,
        bot_public_key: Optional[PublicKeyLike] = None,
        require_known_key: bool = False,
    ) -> List[VerifiedPost]:
        """Load the feed and annotate each post with its verification result."""
        return [
            VerifiedPost(
                prompt=post.prompt,
                output=post.output,
                attestation=post.attestation,
                verified=verify_post(post, bot_public_key, require_known_key),
            )
            for post in self.load()
        ]


def format_feed(posts: Sequence[VerifiedPost]) -> str:
    """Render verified posts for display, one block per post."""
    if not posts:
        return EMPTY_FEED_MESSAGE
    blocks = []
    for i, post in enumerate(posts, start=1):
        blocks.append(
            f"--- Post {i} [{post.badge}] ---\n"
            f"Prompt: {post.prompt}\n"
            f"Output: {post.output}\n"
        )
    return "\n".join(blocks)
