from datetime import timedelta

import pytest

from teamcomm.core.exceptions import AuthorizationError, ValidationError
from teamcomm.core.security import utcnow
from teamcomm.models.enums import TargetDateStatus
from teamcomm.schemas.target_date import TargetDateCreate, TargetDateUpdate
from teamcomm.services.target_date import target_date_service


def _create(db, ctx, task, days, **kwargs):
    data = TargetDateCreate(
        project_name=kwargs.pop("project_name", "Platform"),
        task_name=task,
        target_date=utcnow() + timedelta(days=days),
        **kwargs
    )
    return target_date_service.create(db, ctx, data)


class TestOrdering:
    def test_soonest_first(self, db, seeded, login):
        jdoe = login("jdoe")
        later = _create(db, jdoe, "Later", 10)
        sooner = _create(db, jdoe, "Sooner", 1)
        past = _create(db, jdoe, "Past", -2)

        ids = [t.id for t in target_date_service.list(db, jdoe)]

        assert ids == [past.id, sooner.id, later.id]


class TestQueries:
    def test_upcoming_excludes_past(self, db, seeded, login):
        jdoe = login("jdoe")
        _create(db, jdoe, "Past", -1)
        future = _create(db, jdoe, "Future", 2)

        assert [t.id for t in target_date_service.get_upcoming(db, jdoe)] == [future.id]

    def test_overdue_excludes_completed(self, db, seeded, login):
        jdoe = login("jdoe")
        late = _create(db, jdoe, "Late", -3)
        _create(db, jdoe, "Done", -3, status=TargetDateStatus.COMPLETED)
        _create(db, jdoe, "Future", 3)

        assert [t.id for t in target_date_service.get_overdue(db, jdoe)] == [late.id]

    def test_due_soon_window(self, db, seeded, login):
        jdoe = login("jdoe")
        soon = _create(db, jdoe, "Soon", 2)
        _create(db, jdoe, "Far", 30)
        _create(db, jdoe, "Soon but done", 1, status=TargetDateStatus.COMPLETED)

        assert [t.id for t in target_date_service.get_due_soon(db, jdoe, days=7)] == [soon.id]

    def test_filters_by_project_and_search(self, db, seeded, login):
        jdoe = login("jdoe")
        _create(db, jdoe, "Write docs", 1, project_name="Platform")
        _create(db, jdoe, "Write tests", 2, project_name="Mobile")

        by_project = target_date_service.list(db, jdoe, filters={"project_name": "Mobile"})
        by_search = target_date_service.list(db, jdoe, search="docs")

        assert [t.task_name for t in by_project] == ["Write tests"]
        assert [t.task_name for t in by_search] == ["Write docs"]

    def test_queries_stay_in_scope(self, db, seeded, login):
        _create(db, login("msmith"), "Marketing task", 1)
        assert target_date_service.get_upcoming(db, login("jdoe")) == []


class TestUpdates:
    def test_update_status(self, db, seeded, login):
        jdoe = login("jdoe")
        target = _create(db, jdoe, "Ship", 1)

        updated = target_date_service.update_status(db, jdoe, target.id, TargetDateStatus.IN_PROGRESS)

        assert updated.status == TargetDateStatus.IN_PROGRESS

    def test_update_fields(self, db, seeded, login):
        jdoe = login("jdoe")
        target = _create(db, jdoe, "Ship", 1)

        updated = target_date_service.update(
            db, jdoe, target.id, TargetDateUpdate(documentation_url="https://wiki.example.com/ship")
        )

        assert updated.documentation_url == "https://wiki.example.com/ship"
        assert updated.task_name == "Ship"

    def test_status_change_from_other_workspace_is_refused(self, db, seeded, login):
        target = _create(db, login("jdoe"), "Ship", 1)
        with pytest.raises(AuthorizationError):
            target_date_service.update_status(db, login("msmith"), target.id, TargetDateStatus.CANCELLED)

    def test_archived_hidden_from_upcoming(self, db, seeded, login):
        jdoe = login("jdoe")
        target = _create(db, jdoe, "Ship", 1)
        target_date_service.archive(db, jdoe, target.id)

        assert target_date_service.get_upcoming(db, jdoe) == []

    def test_driver_must_belong_to_the_workspace(self, db, seeded, login):
        jdoe = login("jdoe")
        target = _create(db, jdoe, "Review", 3, driver_user_id=seeded.eng_admin.id)

        with pytest.raises(ValidationError) as exc_info:
            target_date_service.update(db, jdoe, target.id, TargetDateUpdate(driver_user_id=seeded.msmith.id))

        assert exc_info.value.field == "driver_user_id"
