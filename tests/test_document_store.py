"""
Document Store Tests

In-memory and JSON-file stores: CRUD, field transforms, dotted-path updates,
batch delete and transactions.

Run:
----
    pytest tests/test_document_store.py -v
"""

import json

import pytest

from engagement import NotFound
from server.services import (
    DELETE_FIELD,
    ArrayRemove,
    ArrayUnion,
    Increment,
    JsonDocumentStore,
    MemoryDocumentStore,
    StoreError,
)
from server.services.document_store import apply_update, merge_document


class TestMemoryStore:
    @pytest.fixture(autouse=True)
    def setup(self):
        self.store = MemoryDocumentStore()

    def test_add_and_get(self):
        doc_id = self.store.add("posts", {"content": "hi"})
        assert len(doc_id) == 20
        assert self.store.get("posts", doc_id) == {"id": doc_id, "content": "hi"}

    def test_get_missing(self):
        assert self.store.get("posts", "nope") is None

    def test_id_is_not_stored_in_body(self):
        self.store.set("posts", "p1", {"id": "other", "content": "hi"})
        assert self.store.get("posts", "p1")["id"] == "p1"

    def test_returned_documents_are_copies(self):
        self.store.set("posts", "p1", {"tags": ["a"]})
        doc = self.store.get("posts", "p1")
        doc["tags"].append("b")
        assert self.store.get("posts", "p1")["tags"] == ["a"]

    def test_set_merge(self):
        self.store.set("users", "u1", {"a": 1, "nested": {"x": 1}})
        self.store.set("users", "u1", {"b": 2, "nested": {"y": 2}}, merge=True)
        assert self.store.get("users", "u1") == {"id": "u1", "a": 1, "b": 2, "nested": {"x": 1, "y": 2}}

    def test_set_overwrites_without_merge(self):
        self.store.set("users", "u1", {"a": 1})
        self.store.set("users", "u1", {"b": 2})
        assert self.store.get("users", "u1") == {"id": "u1", "b": 2}

    def test_update_missing_raises_not_found(self):
        with pytest.raises(NotFound):
            self.store.update("users", "ghost", {"a": 1})

    def test_update_transforms(self):
        self.store.set("posts", "p1", {"likes": {"likeCount": 1, "likedBy": ["a"], "dislikedBy": ["b"]}})
        self.store.update("posts", "p1", {
            "likes.likedBy": ArrayUnion(["a", "b"]),
            "likes.dislikedBy": ArrayRemove(["b"]),
            "likes.likeCount": Increment(1),
        })
        assert self.store.get("posts", "p1")["likes"] == {
            "likeCount": 2,
            "likedBy": ["a", "b"],
            "dislikedBy": [],
        }

    def test_delete_field(self):
        self.store.set("users", "u1", {"a": 1, "b": 2})
        self.store.update("users", "u1", {"b": DELETE_FIELD})
        assert self.store.get("users", "u1") == {"id": "u1", "a": 1}

    def test_query_and_list(self):
        self.store.set("comments", "c1", {"postId": "p1"})
        self.store.set("comments", "c2", {"postId": "p2"})
        self.store.set("comments", "c3", {"postId": "p1"})
        assert {c["id"] for c in self.store.query("comments", "postId", "p1")} == {"c1", "c3"}
        assert len(self.store.list("comments")) == 3
        assert self.store.list("empty") == []

    def test_delete(self):
        self.store.set("posts", "p1", {})
        assert self.store.delete("posts", "p1") is True
        assert self.store.delete("posts", "p1") is False

    def test_batch_delete(self):
        for i in range(3):
            self.store.set("comments", f"c{i}", {"postId": "p1"})
        self.store.set("posts", "p1", {})
        count = self.store.batch_delete([("comments", "c0"), ("comments", "c1"), ("posts", "p1")])
        assert count == 3
        assert [c["id"] for c in self.store.list("comments")] == ["c2"]
        assert self.store.get("posts", "p1") is None

    def test_transaction_commits_together(self):
        self.store.set("users", "a", {"following": []})
        self.store.set("users", "b", {"followers": []})

        def txn_fn(txn):
            a = txn.get("users", "a")
            txn.update("users", "a", {"following": a["following"] + ["b"]})
            txn.update("users", "b", {"followers": ["a"]})
            return "done"

        assert self.store.run_transaction(txn_fn) == "done"
        assert self.store.get("users", "a")["following"] == ["b"]
        assert self.store.get("users", "b")["followers"] == ["a"]

    def test_transaction_rolls_back_on_failed_write(self):
        self.store.set("users", "a", {"following": []})

        def txn_fn(txn):
            txn.update("users", "a", {"following": ["b"]})
            txn.update("users", "missing", {"followers": ["a"]})

        with pytest.raises(NotFound):
            self.store.run_transaction(txn_fn)
        assert self.store.get("users", "a")["following"] == []

    def test_transaction_error_before_commit_writes_nothing(self):
        self.store.set("users", "a", {"n": 0})

        def txn_fn(txn):
            txn.update("users", "a", {"n": 1})
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            self.store.run_transaction(txn_fn)
        assert self.store.get("users", "a")["n"] == 0

    def test_transaction_read_after_write_rejected(self):
        self.store.set("users", "a", {})

        def txn_fn(txn):
            txn.update("users", "a", {"x": 1})
            txn.get("users", "a")

        with pytest.raises(StoreError):
            self.store.run_transaction(txn_fn)


class TestUpdateHelpers:
    def test_dotted_path_creates_parents(self):
        assert apply_update({}, {"votes.upvotedBy": ArrayUnion(["a"])}) == {"votes": {"upvotedBy": ["a"]}}

    def test_increment_missing_field(self):
        assert apply_update({}, {"n": Increment(-1)}) == {"n": -1}

    def test_array_remove_every_occurrence(self):
        assert apply_update({"l": ["a", "b", "a"]}, {"l": ArrayRemove(["a"])}) == {"l": ["b"]}

    def test_merge_applies_transforms(self):
        merged = merge_document({"posts": [1]}, {"posts": ArrayUnion([1, 2])})
        assert merged == {"posts": [1, 2]}

    def test_input_not_mutated(self):
        doc = {"l": ["a"]}
        apply_update(doc, {"l": ArrayUnion(["b"])})
        assert doc == {"l": ["a"]}


class TestJsonStore:
    def test_persists_and_reloads(self, tmp_path):
        path = tmp_path / "data" / "store.json"
        store = JsonDocumentStore(path)
        store.set("posts", "p1", {"content": "hi"})
        store.update("posts", "p1", {"comments": ArrayUnion(["c1"])})

        on_disk = json.loads(path.read_text())
        assert on_disk["posts"]["p1"] == {"content": "hi", "comments": ["c1"]}

        reloaded = JsonDocumentStore(path)
        assert reloaded.get("posts", "p1")["comments"] == ["c1"]

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(StoreError):
            JsonDocumentStore(path)

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[]")
        with pytest.raises(StoreError):
            JsonDocumentStore(path)
