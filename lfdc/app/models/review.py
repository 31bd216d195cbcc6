"""
Review and comment models.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .base import BackendModel
from .user import AuthorRef


class Comment(BackendModel):
    """Reply under a review."""
    id: str = Field(..., alias="_id")
    user: AuthorRef
    review: Optional[str] = None
    text: str
    likes: List[str] = []
    dislikes: List[str] = []
    created_at: Optional[datetime] = None


class Review(BackendModel):
    """Product review with nested comments."""
    id: str = Field(..., alias="_id")
    user: AuthorRef
    product: Optional[str] = None
    text: str
    rating: int = Field(..., ge=1, le=5)
    likes: List[str] = []
    dislikes: List[str] = []
    comments: List[Comment] = []
    created_at: Optional[datetime] = None

    @field_validator("product", mode="before")
    @classmethod
    def product_id(cls, v):
        if isinstance(v, dict):
            return v.get("_id")
        return v

    def toggle_like(self, user_id: str) -> "Review":
        """Local mirror of review/like: flips the like, drops any dislike."""
        likes = [uid for uid in self.likes if uid != user_id]
        if user_id not in self.likes:
            likes.append(user_id)
        dislikes = [uid for uid in self.dislikes if uid != user_id]
        return self.model_copy(update={"likes": likes, "dislikes": dislikes})

    def toggle_dislike(self, user_id: str) -> "Review":
        """Local mirror of review/dislike: flips the dislike, drops any like."""
        dislikes = [uid for uid in self.dislikes if uid != user_id]
        if user_id not in self.dislikes:
            dislikes.append(user_id)
        likes = [uid for uid in self.likes if uid != user_id]
        return self.model_copy(update={"likes": likes, "dislikes": dislikes})
