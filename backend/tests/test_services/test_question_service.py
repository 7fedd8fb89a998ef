"""
Unit tests for QuestionService.
"""

from unittest.mock import patch

import pytest

from models.exceptions import (
    CannotModifyQuestionException,
    ConflictException,
    QuestionNotFoundException,
    SlugConflictException,
    UserNotFoundException,
    ValidationException,
)
from repositories.db_models import Question, Report, Role
from repositories.question_repository import QuestionRepository
from services.question_service import QuestionService


class TestCreateQuestion:
    """Tests for QuestionService.create_question"""

    def test_create_question_derives_slug(self, db_session, test_user):
        """A new question gets a slug derived from its title."""
        question = QuestionService.create_question(
            db_session,
            author_id=test_user.id,
            title="Linear Algebra: eigenvalues?",
            body="<p>What is an eigenvalue?</p>",
        )

        assert question.id is not None
        assert question.slug == "linear-algebra-eigenvalues"
        assert question.author_id == test_user.id
        assert question.body == "<p>What is an eigenvalue?</p>"

    def test_duplicate_title_raises_conflict(self, db_session, test_user, other_user):
        """Two questions titled 'Calculus help' cannot coexist."""
        QuestionService.create_question(
            db_session, test_user.id, "Calculus help", "First body"
        )

        with pytest.raises(SlugConflictException) as exc_info:
            QuestionService.create_question(
                db_session, other_user.id, "Calculus help", "Second body"
            )

        assert exc_info.value.slug == "calculus-help"
        assert isinstance(exc_info.value, ConflictException)
        assert db_session.query(Question).count() == 1

    def test_titles_differing_in_case_and_punctuation_collide(
        self, db_session, test_user
    ):
        """Titles mapping to the same slug conflict."""
        QuestionService.create_question(db_session, test_user.id, "Calculus help", "a")

        with pytest.raises(SlugConflictException):
            QuestionService.create_question(
                db_session, test_user.id, "  CALCULUS -- Help!! ", "b"
            )

    def test_store_constraint_rejects_duplicate_when_precheck_misses(
        self, db_session, test_user, other_user
    ):
        """A concurrent writer slipping past the pre-check hits the unique index."""
        QuestionService.create_question(
            db_session, test_user.id, "Calculus help", "First body"
        )

        with patch.object(QuestionRepository, "slug_exists", return_value=False):
            with pytest.raises(SlugConflictException):
                QuestionService.create_question(
                    db_session, other_user.id, "Calculus help", "Racing body"
                )

        # The failed insert left nothing behind and the session is usable
        questions = db_session.query(Question).all()
        assert len(questions) == 1
        assert questions[0].body == "First body"

    def test_unknown_author_raises_not_found(self, db_session):
        """Questions need an existing author."""
        with pytest.raises(UserNotFoundException):
            QuestionService.create_question(db_session, 9999, "Orphan", "No author")

    def test_empty_title_raises_validation(self, db_session, test_user):
        """Whitespace or markup-only titles are rejected."""
        with pytest.raises(ValidationException):
            QuestionService.create_question(db_session, test_user.id, "   ", "body")

        with pytest.raises(ValidationException):
            QuestionService.create_question(
                db_session, test_user.id, "<b></b>", "body"
            )

    def test_non_latin_titles_get_slugs(self, db_session, test_user):
        """Titles in any script are accepted and keep their letters."""
        titles = {
            "Математика помощь": "математика-помощь",
            "微积分帮助": "微积分帮助",
            "مساعدة في التفاضل": "مساعدة-في-التفاضل",
        }

        for title, slug in titles.items():
            question = QuestionService.create_question(
                db_session, test_user.id, title, "body text"
            )
            assert question.slug == slug
            found = QuestionService.get_question_by_slug(db_session, slug)
            assert found.id == question.id

    def test_punctuation_only_title_gets_stable_slug(self, db_session, test_user):
        """A title without letters or digits still gets a deterministic slug."""
        question = QuestionService.create_question(
            db_session, test_user.id, "?!?", "body"
        )

        assert question.slug.startswith("q-")
        with pytest.raises(SlugConflictException):
            QuestionService.create_question(db_session, test_user.id, "?!?", "again")

    def test_empty_body_raises_validation(self, db_session, test_user):
        """A body holding only markup is rejected."""
        with pytest.raises(ValidationException):
            QuestionService.create_question(
                db_session, test_user.id, "Valid title", "<p>  </p>"
            )

    def test_title_too_long_raises_validation(self, db_session, test_user):
        """Titles are capped at 200 characters."""
        with pytest.raises(ValidationException):
            QuestionService.create_question(
                db_session, test_user.id, "x" * 201, "body"
            )

    def test_script_tags_are_stripped(self, db_session, test_user):
        """Scripts never reach the store."""
        question = QuestionService.create_question(
            db_session,
            test_user.id,
            "Scripted <script>alert(1)</script>",
            "<p onclick='x()'>Hi</p><script>alert(1)</script>",
        )

        assert "<script>" not in question.title
        assert "<script>" not in question.body
        assert "onclick" not in question.body


class TestGetQuestion:
    """Tests for question lookups"""

    def test_get_by_slug(self, db_session, test_question):
        """Questions are addressable by slug."""
        found = QuestionService.get_question_by_slug(db_session, "calculus-help")
        assert found.id == test_question.id

    def test_get_by_unknown_slug_raises(self, db_session):
        """Unknown slugs raise QuestionNotFoundException."""
        with pytest.raises(QuestionNotFoundException):
            QuestionService.get_question_by_slug(db_session, "nope")

    def test_get_or_raise_unknown_id(self, db_session):
        """Unknown ids raise QuestionNotFoundException."""
        with pytest.raises(QuestionNotFoundException):
            QuestionService.get_question_or_raise(db_session, 12345)

    def test_list_questions_newest_first(self, db_session, test_user):
        """Listing returns newest questions first."""
        first = QuestionService.create_question(db_session, test_user.id, "One", "a")
        second = QuestionService.create_question(db_session, test_user.id, "Two", "b")

        listed = QuestionService.list_questions(db_session)

        assert [q.id for q in listed][:2] == [second.id, first.id]


class TestUpdateQuestion:
    """Tests for QuestionService.update_question"""

    def test_author_can_edit_and_slug_is_kept(self, db_session, test_user, test_question):
        """Editing the title keeps the original slug."""
        updated = QuestionService.update_question(
            db_session,
            test_question.id,
            actor_id=test_user.id,
            actor_role=Role.USER,
            title="Integral calculus help",
        )

        assert updated.title == "Integral calculus help"
        assert updated.slug == "calculus-help"

    def test_admin_can_edit(self, db_session, admin_user, test_question):
        """Administrators may edit any question."""
        updated = QuestionService.update_question(
            db_session,
            test_question.id,
            actor_id=admin_user.id,
            actor_role=Role.ADMIN,
            body="Moderated body",
        )
        assert updated.body == "Moderated body"

    def test_other_user_cannot_edit(self, db_session, other_user, test_question):
        """Users cannot edit someone else's question."""
        with pytest.raises(CannotModifyQuestionException):
            QuestionService.update_question(
                db_session,
                test_question.id,
                actor_id=other_user.id,
                actor_role=Role.USER,
                title="Hijacked",
            )


class TestDeleteQuestion:
    """Tests for QuestionService.delete_question"""

    def test_delete_removes_all_reports(
        self, db_session, test_user, other_user, test_question
    ):
        """Deleting a question removes every report that references it."""
        for reason in ("spam", "off topic", "duplicate"):
            db_session.add(
                Report(
                    question_id=test_question.id,
                    reporter_id=other_user.id,
                    reason=reason,
                )
            )
        db_session.commit()
        question_id = test_question.id

        removed = QuestionService.delete_question(
            db_session, question_id, actor_id=test_user.id, actor_role=Role.USER
        )

        assert removed == 3
        assert db_session.get(Question, question_id) is None
        assert (
            db_session.query(Report).filter(Report.question_id == question_id).count()
            == 0
        )

    def test_delete_leaves_other_questions_reports(
        self, db_session, test_user, other_user, test_question
    ):
        """Only the deleted question's reports go away."""
        keep = Question(
            title="Keep me", body="b", slug="keep-me", author_id=other_user.id
        )
        db_session.add(keep)
        db_session.commit()
        db_session.add(Report(question_id=keep.id, reporter_id=test_user.id, reason="r"))
        db_session.add(
            Report(question_id=test_question.id, reporter_id=test_user.id, reason="r")
        )
        db_session.commit()

        QuestionService.delete_question(
            db_session, test_question.id, actor_id=test_user.id, actor_role=Role.USER
        )

        assert db_session.query(Report).filter(Report.question_id == keep.id).count() == 1

    def test_admin_can_delete(self, db_session, super_admin_user, test_question):
        """Privileged roles may delete any question."""
        removed = QuestionService.delete_question(
            db_session,
            test_question.id,
            actor_id=super_admin_user.id,
            actor_role=Role.SUPER_ADMIN,
        )
        assert removed == 0

    def test_other_user_cannot_delete(self, db_session, other_user, test_question):
        """Regular users cannot delete someone else's question."""
        with pytest.raises(CannotModifyQuestionException):
            QuestionService.delete_question(
                db_session,
                test_question.id,
                actor_id=other_user.id,
                actor_role=Role.USER,
            )
        assert db_session.get(Question, test_question.id) is not None

    def test_delete_missing_question_raises(self, db_session, test_user):
        """Deleting an unknown question raises QuestionNotFoundException."""
        with pytest.raises(QuestionNotFoundException):
            QuestionService.delete_question(
                db_session, 404, actor_id=test_user.id, actor_role=Role.USER
            )
