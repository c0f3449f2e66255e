from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

import firebase_admin
from firebase_admin import firestore as fs
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FirestoreDB:
    def __init__(self, client):
        self.db = client

    @classmethod
    def from_app(cls, app: firebase_admin.App) -> "FirestoreDB":
        return cls(fs.client(app))

    def collection(self, name: str):
        return self.db.collection(name)

    @staticmethod
    def _to_post(snapshot) -> Dict[str, Any]:
        post_data = snapshot.to_dict()
        post_data["id"] = snapshot.id
        return post_data

    def create_post(
            self,
            title: str,
            content: str,
            author: str,
            author_uid: str,
            image_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a new post and return it with its generated ID"""
        new_post_ref = self.collection("posts").document()
        new_post_data = {
            "title": title,
            "content": content,
            "author": author,
            "author_uid": author_uid,
            "created_at": utc_now(),
            "updated_at": None,
            "image_key": image_key,
        }
        new_post_ref.set(new_post_data)
        return {"id": new_post_ref.id, **new_post_data}

    def get_all_posts(self) -> List[Dict[str, Any]]:
        """Get all posts sorted by creation date descending"""
        posts_ref = self.collection("posts").order_by(
            "created_at", direction=firestore.Query.DESCENDING
        ).stream()
        return [self._to_post(doc) for doc in posts_ref]

    def get_posts_by_author(self, author_uid: str) -> List[Dict[str, Any]]:
        """Get the posts written by one user, newest first"""
        posts_ref = self.collection("posts").where(
            filter=FieldFilter("author_uid", "==", author_uid)
        ).order_by(
            "created_at", direction=firestore.Query.DESCENDING
        ).stream()
        return [self._to_post(doc) for doc in posts_ref]

    def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a post by ID, or None if it does not exist"""
        snapshot = self.collection("posts").document(post_id).get()
        if not snapshot.exists:
            return None
        return self._to_post(snapshot)

    def update_post(self, post_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply field changes to a post and return the stored result"""
        post_ref = self.collection("posts").document(post_id)
        post_ref.update({**changes, "updated_at": utc_now()})
        return self.get_post(post_id)

    def delete_post(self, post_id: str) -> None:
        self.collection("posts").document(post_id).delete()

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a user profile document"""
        snapshot = self.collection("users").document(user_id).get()
        if not snapshot.exists:
            return None
        return {"id": snapshot.id, **snapshot.to_dict()}
