"""
Document factories: the stored shape of each resource at creation time.

Engagement sub-objects (likes, votes) and graph lists (following, followers)
are initialized here so readers never have to guess at missing fields.
"""

from typing import Any, Dict, Optional

from engagement import Likes, Votes


def new_user(
    first_name: str,
    last_name: str,
    now: str,
    email: str = "",
    password_hash: Optional[str] = None,
    username: Optional[str] = None,
    user_image: str = "",
    bio: str = "",
    website: str = "",
) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "email": email,
        "firstName": first_name,
        "lastName": last_name,
        "username": username or f"{first_name.lower()}{last_name.lower()}",
        "userImage": user_image,
        "bio": bio,
        "website": website,
        "following": [],
        "followers": [],
        "createdAt": now,
        "updatedAt": now,
    }
    if password_hash is not None:
        doc["password"] = password_hash
    return doc


def author_fields(author: Dict[str, Any]) -> Dict[str, Any]:
    """Author display fields copied onto posts and comments."""
    return {
        "userId": author["id"],
        "username": author.get("username", ""),
        "firstName": author.get("firstName", ""),
        "lastName": author.get("lastName", ""),
        "userImage": author.get("userImage", ""),
    }


def new_post(author: Dict[str, Any], content: str, now: str) -> Dict[str, Any]:
    return {
        "content": content,
        **author_fields(author),
        "createdAt": now,
        "updatedAt": now,
        "likes": Likes().to_document(),
        "comments": [],
    }


def new_comment(author: Dict[str, Any], post_id: str, text: str, now: str) -> Dict[str, Any]:
    return {
        "postId": post_id,
        **author_fields(author),
        "text": text,
        "createdAt": now,
        "updatedAt": now,
        "votes": Votes().to_document(),
    }
