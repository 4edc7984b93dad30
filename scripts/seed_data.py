"""
python -m scripts.seed_data

Creates two workspaces, their users and a few records so the API has
something to show. Safe to re-run: existing workspaces and users are kept.
"""

import sys
from datetime import timedelta

sys.path.insert(0, ".")

from teamcomm.bootstrap import init_database
from teamcomm.core.config import load_settings
from teamcomm.core.logging_config import logger
from teamcomm.core.security import utcnow
from teamcomm.crud import user as user_crud
from teamcomm.crud import workspace as workspace_crud
from teamcomm.models.announcement import Announcement
from teamcomm.models.deployment import Deployment
from teamcomm.models.enums import DeploymentStatus, Environment, Priority, TargetDateStatus, UserRole
from teamcomm.models.target_date import TargetDate

DEFAULT_PASSWORD = "changeme123"

WORKSPACES = [
    ("Engineering", "Product engineering and releases"),
    ("Marketing", "Campaigns and launches"),
]

# username, full name, role, workspace name
USERS = [
    ("sys_admin", "System Administrator", UserRole.SUPER_ADMIN, None),
    ("eng_admin", "Engineering Admin", UserRole.ADMIN, "Engineering"),
    ("jdoe", "John Doe", UserRole.USER, "Engineering"),
    ("msmith", "Mary Smith", UserRole.USER, "Marketing"),
]


def seed_data(db):
    """Add sample workspaces, users and records."""
    now = utcnow()

    workspaces = {}
    for name, description in WORKSPACES:
        workspace = workspace_crud.get_by_name(db, name)
        if workspace is None:
            workspace = workspace_crud.create(db, name=name, description=description, actor_id=None)
            logger.info(f"Added workspace: {name}")
        workspaces[name] = workspace

    users = {}
    for username, full_name, role, workspace_name in USERS:
        user = user_crud.get_by_username(db, username)
        if user is None:
            user = user_crud.create(
                db,
                username=username,
                password=DEFAULT_PASSWORD,
                full_name=full_name,
                role=role,
                workspace_id=workspaces[workspace_name].id if workspace_name else None,
            )
            logger.info(f"Added user: {username} ({role.value})")
        users[username] = user

    engineering = workspaces["Engineering"].id
    marketing = workspaces["Marketing"].id
    jdoe = users["jdoe"].id
    msmith = users["msmith"].id

    db.add_all([
        Announcement(
            workspace_id=engineering,
            title="Code freeze on Friday",
            content="No merges to main after 17:00 on Friday.",
            priority=Priority.HIGH,
            created_by=jdoe,
            updated_by=jdoe,
        ),
        Announcement(
            workspace_id=marketing,
            title="Campaign kickoff",
            content="Spring campaign planning starts Monday.",
            priority=Priority.NORMAL,
            expiration_date=now + timedelta(days=14),
            created_by=msmith,
            updated_by=msmith,
        ),
        TargetDate(
            workspace_id=engineering,
            project_name="Platform",
            task_name="Finish API review",
            target_date=now + timedelta(days=3),
            driver_user_id=jdoe,
            status=TargetDateStatus.IN_PROGRESS,
            created_by=jdoe,
            updated_by=jdoe,
        ),
        Deployment(
            workspace_id=engineering,
            release_name="Platform",
            version="2.4.0",
            deployment_datetime=now + timedelta(days=1),
            driver_user_id=jdoe,
            ticket_number="OPS-1024",
            environment=Environment.STAGING,
            status=DeploymentStatus.PLANNED,
            created_by=jdoe,
            updated_by=jdoe,
        ),
    ])
    db.commit()
    logger.info(f"Seed data added; all users have password '{DEFAULT_PASSWORD}'")


if __name__ == "__main__":
    engine, session_factory, _ = init_database(load_settings())
    db = session_factory()
    try:
        seed_data(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Error: {e}")
        raise
    finally:
        db.close()
        engine.dispose()
