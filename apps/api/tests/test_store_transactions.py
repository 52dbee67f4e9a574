"""Store-level cascade rollback and uniqueness tests."""

from __future__ import annotations

import threading
import unittest

from app.domain.identifiers import is_object_id, new_object_id
from app.domain.ratings import average_rating
from app.repositories.memory import DuplicateRecordError, InMemoryStore


def _fields(title: str = "The Brave Porter") -> dict[str, str]:
    return {
        "title": title,
        "content": "A porter carried a mountain's secret down to the valley.",
        "region": "Nepal",
        "genre": "Legend",
        "age_group": "Adult",
        "image_url": "https://images.example.com/porter.png",
    }


class CascadeRollbackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.folktale = self.store.create_folktale(**_fields())
        self.store.create_comment(folktale_id=self.folktale.id, user_id="u1", content="Nice")
        self.store.create_bookmark(user_id="u1", folktale_id=self.folktale.id)

    def test_rollback_restores_removed_records_and_write_count(self) -> None:
        comment = next(iter(self.store.comments.values()))
        bookmark = next(iter(self.store.bookmarks.values()))
        writes_before = self.store.content_write_count
        self.store.cascade_delete_failpoint_stage = "after_folktale"

        with self.assertRaises(RuntimeError):
            self.store.delete_folktale_cascade(self.folktale.id)

        self.assertIs(self.store.folktales[self.folktale.id], self.folktale)
        self.assertIs(self.store.comments[comment.id], comment)
        self.assertIs(self.store.bookmarks[bookmark.id], bookmark)
        self.assertEqual(self.store.content_write_count, writes_before)

    def test_rollback_leaves_unrelated_records_untouched(self) -> None:
        unrelated = self.store.create_folktale(**_fields("The Lost Yak"))
        unrelated_comment = self.store.create_comment(folktale_id=unrelated.id, user_id="u1", content="Also nice")
        folktales_dict = self.store.folktales
        comments_dict = self.store.comments

        for stage in ("after_comments", "after_bookmarks", "after_folktale"):
            with self.subTest(stage=stage):
                self.store.cascade_delete_failpoint_stage = stage

                with self.assertRaises(RuntimeError):
                    self.store.delete_folktale_cascade(self.folktale.id)

                self.assertIs(self.store.folktales, folktales_dict)
                self.assertIs(self.store.comments, comments_dict)
                self.assertIs(self.store.folktales[unrelated.id], unrelated)
                self.assertIs(self.store.comments[unrelated_comment.id], unrelated_comment)

    def test_successful_cascade_leaves_unrelated_records_untouched(self) -> None:
        unrelated = self.store.create_folktale(**_fields("The Lost Yak"))

        result = self.store.delete_folktale_cascade(self.folktale.id)

        self.assertEqual((result.comments_removed, result.bookmarks_removed), (1, 1))
        self.assertIs(self.store.folktales[unrelated.id], unrelated)
        self.assertEqual(list(self.store.folktales), [unrelated.id])

    def test_failpoint_fires_once(self) -> None:
        self.store.cascade_delete_failpoint_stage = "after_bookmarks"

        with self.assertRaises(RuntimeError):
            self.store.delete_folktale_cascade(self.folktale.id)
        result = self.store.delete_folktale_cascade(self.folktale.id)

        self.assertIsNotNone(result)
        self.assertEqual(result.comments_removed, 1)
        self.assertIsNone(self.store.cascade_delete_failpoint_stage)

    def test_cascade_of_missing_folktale_returns_none(self) -> None:
        self.assertIsNone(self.store.delete_folktale_cascade(new_object_id()))

    def test_concurrent_comment_and_delete_never_orphan(self) -> None:
        barrier = threading.Barrier(2)

        def _comment() -> None:
            barrier.wait()
            self.store.create_comment(folktale_id=self.folktale.id, user_id="u2", content="Racing")

        def _delete() -> None:
            barrier.wait()
            self.store.delete_folktale_cascade(self.folktale.id)

        threads = [threading.Thread(target=_comment), threading.Thread(target=_delete)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertNotIn(self.folktale.id, self.store.folktales)
        self.assertEqual(
            [record for record in self.store.comments.values() if record.folktale_id == self.folktale.id],
            [],
        )


class UniquenessTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.folktale = self.store.create_folktale(**_fields())

    def test_duplicate_user_email_and_username(self) -> None:
        self.store.create_user(username="alpha", email="alpha@example.com", password_hash="h")

        with self.assertRaises(DuplicateRecordError) as email_ctx:
            self.store.create_user(username="beta", email="alpha@example.com", password_hash="h")
        with self.assertRaises(DuplicateRecordError) as username_ctx:
            self.store.create_user(username="alpha", email="beta@example.com", password_hash="h")

        self.assertEqual(email_ctx.exception.constraint, "users.email")
        self.assertEqual(username_ctx.exception.constraint, "users.username")

    def test_one_rating_comment_and_bookmark_per_user(self) -> None:
        self.store.add_rating(folktale_id=self.folktale.id, user_id="u1", rating=4)
        self.store.create_comment(folktale_id=self.folktale.id, user_id="u1", content="Hi")
        self.store.create_bookmark(user_id="u1", folktale_id=self.folktale.id)

        for constraint, write in (
            ("folktales.ratings.user_id", lambda: self.store.add_rating(folktale_id=self.folktale.id, user_id="u1", rating=2)),
            ("comments.folktale_id_user_id", lambda: self.store.create_comment(folktale_id=self.folktale.id, user_id="u1", content="Again")),
            ("bookmarks.user_id_folktale_id", lambda: self.store.create_bookmark(user_id="u1", folktale_id=self.folktale.id)),
        ):
            with self.subTest(constraint=constraint):
                with self.assertRaises(DuplicateRecordError) as ctx:
                    write()
                self.assertEqual(ctx.exception.constraint, constraint)

    def test_unknown_folktale_fields_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.store.create_folktale(**_fields(), views=100)


class DomainHelperTests(unittest.TestCase):
    def test_object_ids(self) -> None:
        generated = new_object_id()

        self.assertTrue(is_object_id(generated))
        self.assertTrue(is_object_id("0123456789ABCDEF01234567"))
        self.assertFalse(is_object_id("0123456789abcdef0123456"))
        self.assertFalse(is_object_id(None))

    def test_average_rating(self) -> None:
        self.assertIsNone(average_rating([]))
        self.assertEqual(average_rating([5, 4, 4]), 4.3)
