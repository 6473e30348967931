"""Unit tests for AppStore actions."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from projectboard import AppStore, BoardController, Settings
from projectboard.board_logging import ALL_EVENTS
from projectboard.errors import ValidationError
from projectboard.models import Priority, Project, Role, TaskStatus, User
from projectboard.navigation import View


class TestConstruction:
    """Test cases for building a store."""

    def test_from_seed_logs_in_admin(self, store):
        snapshot = store.snapshot

        assert snapshot.current_user.email == "alice@company.com"
        assert snapshot.current_view is View.DASHBOARD
        assert snapshot.revision == 0
        assert (len(snapshot.users), len(snapshot.projects), len(snapshot.tasks), len(snapshot.comments)) == (4, 3, 5, 4)

    def test_from_seed_without_auto_login(self):
        store = AppStore.from_seed(Settings(auto_login_email=None))
        assert store.snapshot.current_user is None

    def test_from_seed_unknown_auto_login(self, caplog):
        store = AppStore.from_seed(Settings(auto_login_email="nobody@company.com"))

        assert store.snapshot.current_user is None
        assert "matches no seeded user" in caplog.text

    def test_from_seed_without_data(self):
        store = AppStore.from_seed(Settings(seed=False))

        assert store.snapshot.users == ()
        assert store.snapshot.current_user is None

    def test_duplicate_ids_rejected(self):
        user = User(id="1", name="A", email="a@x.com")
        with pytest.raises(ValidationError, match="Duplicate id '1' in users"):
            AppStore(users=[user, user])


class TestSession:
    """Test cases for login, logout and navigation actions."""

    def test_login_known_email_any_password(self, store):
        assert store.login("bob@company.com", "") is True
        assert store.snapshot.current_user.id == "2"

    def test_login_is_case_sensitive(self, store):
        before = store.snapshot

        assert store.login("BOB@company.com", "secret") is False
        assert store.snapshot is before

    def test_login_failure_emits_event(self, store):
        failed = MagicMock()
        store.events.register_hook("login_failed", failed)

        store.login("ghost@company.com", "x")

        assert failed.call_args.kwargs["email"] == "ghost@company.com"

    def test_logout_returns_to_dashboard_and_keeps_selection(self, store):
        store.select_project("1")
        store.select_task("2")

        store.logout()

        snapshot = store.snapshot
        assert snapshot.current_user is None
        assert snapshot.current_view is View.DASHBOARD
        assert snapshot.selected_project_id == "1"
        assert snapshot.selected_task_id == "2"

    def test_set_current_view_accepts_string(self, store):
        store.set_current_view("users")
        assert store.snapshot.current_view is View.USERS

    def test_set_current_view_unknown(self, store):
        with pytest.raises(ValidationError):
            store.set_current_view("reports")
        assert store.snapshot.current_view is View.DASHBOARD

    def test_select_project_and_clear(self, store):
        store.select_project("2")
        assert (store.snapshot.current_view, store.snapshot.selected_project_id) == (View.PROJECT_DETAIL, "2")

        store.select_project(None)
        assert (store.snapshot.current_view, store.snapshot.selected_project_id) == (View.PROJECTS, None)

    def test_select_unknown_project_is_allowed(self, store):
        store.select_project("99")

        assert store.snapshot.selected_project_id == "99"
        assert store.snapshot.selected_project is None

    def test_select_task_and_clear(self, store):
        store.select_project("1")
        store.select_task("3")
        assert store.snapshot.current_view is View.TASK_DETAIL

        store.select_task(None)
        assert store.snapshot.current_view is View.PROJECT_DETAIL
        assert store.snapshot.selected_project_id == "1"


class TestProjects:
    """Test cases for project actions."""

    def test_add_project_assigns_id(self, store):
        project = store.add_project(
            name="Data Platform", start_date="2024-05-01", end_date="2024-12-31", teamMembers=["2"],
        )

        assert project.id == "4"
        assert store.snapshot.projects[-1] == project
        assert project.team_members == ("2",)

    def test_add_project_from_mapping(self, store):
        project = store.add_project({"name": "Site", "startDate": "2024-01-01", "endDate": "2024-02-01"})
        assert project.start_date == date(2024, 1, 1)

    def test_add_project_rejects_caller_id(self, store):
        with pytest.raises(ValidationError, match="assigned by the store"):
            store.add_project(id="42", name="X", start_date="2024-01-01", end_date="2024-02-01")
        assert len(store.snapshot.projects) == 3

    def test_add_project_invalid_leaves_state(self, store):
        before = store.snapshot
        with pytest.raises(ValidationError):
            store.add_project(name="  ", start_date="2024-01-01", end_date="2024-02-01")
        assert store.snapshot is before

    def test_update_project_partial(self, store):
        project = store.update_project("2", status="Suspended")

        assert project.status.value == "Suspended"
        assert project.name == "Mobile App"
        assert store.snapshot.find_project("2") == project

    def test_update_project_keeps_position(self, store):
        store.update_project("1", {"name": "Shop"})
        assert [p.id for p in store.snapshot.projects] == ["1", "2", "3"]

    def test_update_missing_project(self, store):
        before = store.snapshot

        assert store.update_project("99", name="Ghost") is None
        assert store.snapshot is before

    def test_delete_project_cascades(self, store):
        assert store.delete_project("1") is True

        snapshot = store.snapshot
        assert [p.id for p in snapshot.projects] == ["2", "3"]
        assert [t.id for t in snapshot.tasks] == ["4", "5"]
        assert [c.id for c in snapshot.comments] == ["4"]

    def test_delete_missing_project(self, store):
        before = store.snapshot
        assert store.delete_project("99") is False
        assert store.snapshot is before


class TestTasks:
    """Test cases for task actions."""

    def test_add_task_defaults(self, store):
        task = store.add_task(title="Checkout flow", due_date="2024-06-01", project_id="1")

        assert task.id == "6"
        assert task.status is TaskStatus.TODO
        assert task.priority is Priority.MEDIUM
        assert task.assigned_to == ""

    def test_add_task_unknown_project_is_allowed(self, store):
        task = store.add_task(title="Orphan", due_date="2024-06-01", project_id="99", assigned_to="77")
        assert store.snapshot.find_task(task.id).project_id == "99"

    def test_update_task_status(self, store):
        task = store.update_task("3", status="In Progress")

        assert task.status is TaskStatus.IN_PROGRESS
        assert task.title == "Payment system integration"

    def test_update_task_rejects_unknown_field(self, store):
        with pytest.raises(ValidationError, match="Unknown Task field"):
            store.update_task("3", estimate=5)

    def test_update_missing_task(self, store):
        assert store.update_task("99", status="Done") is None

    def test_delete_task_removes_comments(self, store):
        assert store.delete_task("1") is True

        assert store.snapshot.find_task("1") is None
        assert [c.id for c in store.snapshot.comments] == ["3", "4"]

    def test_delete_missing_task(self, store):
        assert store.delete_task("99") is False


class TestComments:
    """Test cases for comment actions."""

    def test_add_comment_stamps_clock(self, store, clock):
        comment = store.add_comment(content="Looks good", task_id="2", user_id="1")

        assert comment.id == "5"
        assert comment.created_at == clock()
        assert store.snapshot.comments[-1] == comment

    def test_add_comment_rejects_created_at(self, store):
        with pytest.raises(ValidationError, match="created_at"):
            store.add_comment(content="x", task_id="2", user_id="1", createdAt="2020-01-01T00:00:00Z")

    def test_add_comment_blank(self, store):
        with pytest.raises(ValidationError, match="cannot be empty"):
            store.add_comment(content="   ", task_id="2", user_id="1")

    def test_update_comment_keeps_timestamp(self, store):
        original = store.snapshot.find_comment("3")

        updated = store.update_comment("3", content="API is done too.")

        assert updated.content == "API is done too."
        assert updated.created_at == original.created_at

    def test_delete_comment(self, store):
        assert store.delete_comment("2") is True
        assert store.delete_comment("2") is False


class TestUsers:
    """Test cases for user actions."""

    def test_add_user(self, store):
        user = store.add_user(name="Eve Stone", email="eve@company.com")

        assert user.id == "5"
        assert user.role is Role.MEMBER

    def test_add_user_duplicate_email(self, store):
        with pytest.raises(ValidationError, match="already used"):
            store.add_user(name="Bob Again", email="bob@company.com")
        assert len(store.snapshot.users) == 4

    def test_add_user_non_text_name(self, store):
        """A number where text is expected is a validation error, not a crash."""
        with pytest.raises(ValidationError, match="expected text"):
            store.add_user(name=123, email="n@company.com")
        assert len(store.snapshot.users) == 4
        assert store.snapshot.revision == 0

    def test_update_task_non_text_title(self, store):
        with pytest.raises(ValidationError, match="Invalid title"):
            store.update_task("1", title=["Write", "tests"])
        assert store.snapshot.revision == 0

    def test_update_user_email_taken(self, store):
        with pytest.raises(ValidationError, match="already used"):
            store.update_user("2", email="claire@company.com")

    def test_update_user_same_email(self, store):
        assert store.update_user("2", email="bob@company.com", name="Robert Dubois").name == "Robert Dubois"

    def test_update_current_user_refreshes_session(self, store):
        store.update_user("1", name="Alice M.")
        assert store.snapshot.current_user.name == "Alice M."

    def test_update_other_user_keeps_session(self, store):
        store.update_user("2", role="Admin")
        assert store.snapshot.current_user.id == "1"

    def test_delete_user_has_no_cascade(self, store):
        assert store.delete_user("2") is True

        snapshot = store.snapshot
        assert snapshot.find_user("2") is None
        assert snapshot.find_task("2").assigned_to == "2"
        assert snapshot.find_comment("3").user_id == "2"

    def test_delete_current_user_is_tolerated(self, store):
        assert store.delete_user("1") is True
        assert store.snapshot.current_user.id == "1"


class TestIdentifiers:
    """Test cases for generated ids."""

    def test_ids_are_never_reused(self, store):
        first = store.add_project(name="A", start_date="2024-01-01", end_date="2024-01-02")
        store.delete_project(first.id)

        second = store.add_project(name="B", start_date="2024-01-01", end_date="2024-01-02")

        assert (first.id, second.id) == ("4", "5")

    def test_non_numeric_ids_are_skipped(self, empty_store):
        store = AppStore(projects=[
            Project(id="alpha", name="A", start_date=date(2024, 1, 1), end_date=date(2024, 1, 2)),
        ])

        assert store.add_project(name="B", start_date="2024-01-01", end_date="2024-01-02").id == "1"
        assert empty_store.add_user(name="U", email="u@x.com").id == "1"


class TestSubscriptions:
    """Test cases for snapshot notifications."""

    def test_subscriber_receives_new_snapshot(self, store):
        received = []
        store.subscribe(received.append)

        store.update_task("2", status="Done")

        assert len(received) == 1
        assert received[0] is store.snapshot
        assert received[0].revision == 1

    def test_unsubscribe(self, store):
        received = []
        unsubscribe = store.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        store.select_project("1")

        assert received == []

    def test_failing_subscriber_does_not_stop_others(self, store, caplog):
        received = []

        def broken(snapshot):
            raise RuntimeError("render failed")

        store.subscribe(broken)
        store.subscribe(received.append)

        store.set_current_view("projects")

        assert len(received) == 1
        assert "Error in broadcast: render failed" in caplog.text

    def test_misses_do_not_notify(self, store):
        callback = MagicMock()
        store.subscribe(callback)

        store.update_project("99", name="x")
        store.delete_comment("99")
        store.login("nobody@company.com", "")

        callback.assert_not_called()

    def test_events_carry_revision(self, store):
        seen = []
        store.events.register_hook(ALL_EVENTS, lambda event_type, **data: seen.append((event_type, data["revision"])))

        store.select_project("1")
        store.delete_project("1")

        assert seen == [("project_selected", 1), ("project_deleted", 2)]

    def test_reentrant_subscriber_keeps_revision_order(self, store):
        """A subscriber that writes back to the store must not reorder delivery.

        Rendering after the open project is deleted falls back to the project
        list, which commits a new snapshot from inside the broadcast.
        """
        controller = BoardController(store)
        store.select_project("1")
        received = []
        store.subscribe(lambda snapshot: controller.render())
        store.subscribe(received.append)

        store.delete_project("1")

        assert [s.revision for s in received] == [2, 3]
        assert received[-1] is store.snapshot
        assert store.snapshot.current_view is View.PROJECTS

    def test_subscriber_writes_are_delivered_after_current_snapshot(self, store):
        order = []

        def first(snapshot):
            order.append(("first", snapshot.revision))
            if snapshot.revision == 1:
                store.set_current_view("users")

        store.subscribe(first)
        store.subscribe(lambda snapshot: order.append(("second", snapshot.revision)))

        store.set_current_view("projects")

        assert order == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]
        assert store.snapshot.current_view is View.USERS


class TestReset:
    def test_reset_restores_initial_state(self, store):
        store.delete_project("1")
        store.logout()

        store.reset()

        snapshot = store.snapshot
        assert len(snapshot.projects) == 3
        assert len(snapshot.comments) == 4
        assert snapshot.current_user.id == "1"
        assert snapshot.revision == 3

    def test_reset_does_not_reuse_ids(self, store):
        store.add_task(title="Temp", due_date="2024-06-01", project_id="1")
        store.reset()

        assert store.add_task(title="Next", due_date="2024-06-01", project_id="1").id == "7"
