from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from uuid import UUID

from sqlalchemy.exc import OperationalError

from tests._bootstrap import bootstrap_backend_imports, reset_caches
from tests._db import make_session


bootstrap_backend_imports()
reset_caches()

from app.common.exceptions import ApiException, RecordNotFoundError  # noqa: E402

MISSING_ID = UUID("00000000-0000-0000-0000-000000000001")


class TaskServiceCreateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()

    def tearDown(self) -> None:
        self.db.close()

    def _svc(self):
        from app.task.service import TaskService  # noqa: E402

        return TaskService(self.db)

    def _counts(self) -> tuple[int, int, int]:
        from app.label.models import Label  # noqa: E402
        from app.task.models import Task, TaskLabel  # noqa: E402

        return (
            self.db.query(Task).count(),
            self.db.query(Label).count(),
            self.db.query(TaskLabel).count(),
        )

    def test_title_only_gets_defaults(self) -> None:
        from app.task.models import TaskPriority, TaskStatus  # noqa: E402

        task = self._svc().create({"title": "Buy milk"})
        self.assertIsInstance(task.id, UUID)
        self.assertEqual(task.priority, TaskPriority.MEDIUM)
        self.assertEqual(task.status, TaskStatus.TODO)
        self.assertIsNone(task.due_date)
        self.assertIsNone(task.description)
        self.assertIsNotNone(task.created_at)
        self.assertIsNotNone(task.updated_at)

    def test_creates_labels_and_associations(self) -> None:
        from app.task.models import TaskLabel  # noqa: E402

        task = self._svc().create(
            {
                "title": "t",
                "description": "d",
                "priority": "HIGH",
                "dueDate": "2026-06-01T09:00:00Z",
                "labels": [{"name": "work", "color": "#ff0000"}, {"name": "home"}],
            }
        )
        self.assertEqual(task.description, "d")
        self.assertEqual(self._counts(), (1, 2, 2))
        links = self.db.query(TaskLabel).filter(TaskLabel.task_id == task.id).all()
        self.assertEqual(
            sorted((link.label.name, link.label.color) for link in links),
            [("home", "#3b82f6"), ("work", "#ff0000")],
        )

    def test_second_request_reuses_label_by_name(self) -> None:
        from app.label.models import Label  # noqa: E402

        svc = self._svc()
        svc.create({"title": "a", "labels": [{"name": "work", "color": "#ff0000"}]})
        svc.create({"title": "b", "labels": [{"name": "work", "color": "#00ff00"}]})

        labels = self.db.query(Label).filter(Label.name == "work").all()
        self.assertEqual(len(labels), 1)
        self.assertEqual(labels[0].color, "#ff0000")
        self.assertEqual(self._counts(), (2, 1, 2))

    def test_invalid_due_date_is_client_error_and_persists_nothing(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self._svc().create({"title": "t", "dueDate": "not-a-date", "labels": [{"name": "x"}]})
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, "Invalid due date format")
        self.assertEqual(self._counts(), (0, 0, 0))

    def test_validation_failure_is_server_error_and_persists_nothing(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self._svc().create({"title": "t", "priority": "URGENT"})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "Failed to create task")
        self.assertEqual(self._counts(), (0, 0, 0))

    def test_non_object_payload_fails(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self._svc().create(["not", "an", "object"])
        self.assertEqual(ctx.exception.status_code, 500)

    def test_storage_failure_mid_labels_rolls_back_everything(self) -> None:
        from app.label.service import LabelService  # noqa: E402

        original = LabelService.resolve
        calls = {"n": 0}

        def flaky(self_, label):  # noqa: ANN001
            calls["n"] += 1
            if calls["n"] == 2:
                raise OperationalError("stmt", {}, Exception("disk I/O error"))
            return original(self_, label)

        with patch.object(LabelService, "resolve", flaky):
            with self.assertRaises(ApiException) as ctx:
                self._svc().create({"title": "t", "labels": [{"name": "a"}, {"name": "b"}]})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(self._counts(), (0, 0, 0))

    def test_same_label_twice_in_one_request_fails_atomically(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self._svc().create({"title": "t", "labels": [{"name": "dup"}, {"name": "dup", "color": "#000"}]})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(self._counts(), (0, 0, 0))


class TaskServiceListTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        from app.task.service import TaskService  # noqa: E402

        self.svc = TaskService(self.db)
        self.a = self.svc.create(
            {"title": "a", "status": "TODO", "priority": "HIGH", "dueDate": "2026-03-03",
             "labels": [{"name": "work"}]}
        )
        self.b = self.svc.create(
            {"title": "b", "status": "DONE", "priority": "LOW", "dueDate": "2026-03-01",
             "labels": [{"name": "home"}]}
        )
        self.c = self.svc.create(
            {"title": "c", "status": "IN_PROGRESS", "priority": "HIGH", "dueDate": "2026-03-02",
             "labels": [{"name": "work"}, {"name": "home"}]}
        )
        self.d = self.svc.create({"title": "d", "status": "DONE", "priority": "HIGH", "dueDate": "2026-03-04"})

    def tearDown(self) -> None:
        self.db.close()

    def _titles(self, **kwargs) -> list[str]:
        return [task.title for task in self.svc.list_tasks(**kwargs)]

    def test_no_filters_returns_all_ordered_by_due_date(self) -> None:
        self.assertEqual(self._titles(), ["b", "c", "a", "d"])

    def test_status_filter_is_union(self) -> None:
        self.assertEqual(self._titles(statuses=["DONE", "TODO"]), ["b", "a", "d"])

    def test_categories_intersect(self) -> None:
        self.assertEqual(self._titles(statuses=["DONE", "TODO"], priorities=["HIGH"]), ["a", "d"])

    def test_label_filter_matches_any_listed_label(self) -> None:
        self.assertEqual(self._titles(label_names=["work"]), ["c", "a"])
        self.assertEqual(self._titles(label_names=["work", "home"]), ["b", "c", "a"])
        self.assertEqual(self._titles(label_names=["nope"]), [])

    def test_label_filter_with_priority(self) -> None:
        self.assertEqual(self._titles(label_names=["home"], priorities=["HIGH"]), ["c"])

    def test_results_carry_labels(self) -> None:
        tasks = {task.title: task for task in self.svc.list_tasks()}
        self.assertEqual(sorted(link.label.name for link in tasks["c"].labels), ["home", "work"])
        self.assertEqual(tasks["d"].labels, [])

    def test_unknown_enum_value_is_server_error(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self.svc.list_tasks(statuses=["BOGUS"])
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "Failed to fetch tasks")

    def test_storage_error_is_server_error(self) -> None:
        from app.task.service import TaskService  # noqa: E402

        db = MagicMock()
        db.query.side_effect = OperationalError("stmt", {}, Exception("gone"))
        with self.assertRaises(ApiException) as ctx:
            TaskService(db).list_tasks()
        self.assertEqual(ctx.exception.status_code, 500)


class TaskServiceDeleteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        from app.task.service import TaskService  # noqa: E402

        self.svc = TaskService(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_delete_removes_task_and_associations_but_keeps_labels(self) -> None:
        from app.label.models import Label  # noqa: E402
        from app.task.models import Task, TaskLabel  # noqa: E402

        task = self.svc.create(
            {"title": "gone", "dueDate": "2026-01-01", "labels": [{"name": "work"}, {"name": "home"}]}
        )
        keep = self.svc.create({"title": "keep", "labels": [{"name": "work"}]})

        snapshot = self.svc.delete(task.id)
        self.assertEqual(snapshot.id, task.id)
        self.assertEqual(snapshot.title, "gone")
        self.assertEqual(snapshot.due_date, datetime(2026, 1, 1, tzinfo=timezone.utc))

        self.assertIsNone(self.db.query(Task).filter(Task.id == task.id).first())
        self.assertEqual(self.db.query(TaskLabel).filter(TaskLabel.task_id == task.id).count(), 0)
        self.assertEqual(self.db.query(TaskLabel).filter(TaskLabel.task_id == keep.id).count(), 1)
        self.assertEqual(self.db.query(Label).count(), 2)

    def test_delete_missing_raises_not_found(self) -> None:
        with self.assertRaises(RecordNotFoundError):
            self.svc.delete(MISSING_ID)

    def test_delete_by_raw_id_requires_id(self) -> None:
        for raw in (None, ""):
            with self.assertRaises(ApiException) as ctx:
                self.svc.delete_by_raw_id(raw)
            self.assertEqual(ctx.exception.status_code, 400)
            self.assertEqual(ctx.exception.message, "Task ID is required")

    def test_delete_by_raw_id_missing_task_reports_details(self) -> None:
        from app.task.models import Task  # noqa: E402

        self.svc.create({"title": "other"})
        with self.assertRaises(ApiException) as ctx:
            self.svc.delete_by_raw_id(str(MISSING_ID))
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "Failed to delete task")
        self.assertIn(str(MISSING_ID), ctx.exception.details)
        self.assertEqual(self.db.query(Task).count(), 1)

    def test_delete_by_raw_id_malformed_id(self) -> None:
        with self.assertRaises(ApiException) as ctx:
            self.svc.delete_by_raw_id("not-a-uuid")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertTrue(ctx.exception.details)

    def test_failed_task_delete_keeps_associations(self) -> None:
        from app.task.models import TaskLabel  # noqa: E402

        task = self.svc.create({"title": "t", "labels": [{"name": "work"}]})
        task_id = task.id

        with patch.object(self.db, "delete", side_effect=OperationalError("stmt", {}, Exception("locked"))):
            with self.assertRaises(ApiException) as ctx:
                self.svc.delete_by_raw_id(str(task_id))
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("locked", ctx.exception.details)
        self.assertEqual(self.db.query(TaskLabel).filter(TaskLabel.task_id == task_id).count(), 1)
