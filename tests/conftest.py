import datetime as dt
import itertools

import pytest
from rest_framework.test import APIClient

from apps.core.models import User
from apps.domains.courses.models import Course
from apps.domains.groups.models import Group, GroupScheduleSlot
from apps.domains.sessions.models import Session

_seq = itertools.count(1)


def make_user(role, **extra):
    n = next(_seq)
    return User.objects.create_user(
        username=extra.pop("username", f"{role}{n}"),
        password="pass1234!",
        role=role,
        name=extra.pop("name", f"{role.title()} {n}"),
        **extra,
    )


# ======================================================
# Users
# ======================================================

@pytest.fixture
def student(db):
    return make_user(User.Role.STUDENT, name="Alice")


@pytest.fixture
def student2(db):
    return make_user(User.Role.STUDENT, name="Bob")


@pytest.fixture
def trainer(db):
    return make_user(User.Role.TRAINER, name="Tom Trainer")


@pytest.fixture
def other_trainer(db):
    return make_user(User.Role.TRAINER, name="Olga Trainer")


@pytest.fixture
def clo(db):
    return make_user(User.Role.CLO, name="Carla CLO")


@pytest.fixture
def reception(db):
    return make_user(User.Role.RECEPTION, name="Rita Reception")


# ======================================================
# Catalogue
# ======================================================

@pytest.fixture
def course(db, trainer, clo):
    return Course.objects.create(
        title="Robotics 101",
        instructor=trainer,
        created_by=clo,
        price="300.00",
        status=Course.Status.PUBLISHED,
    )


@pytest.fixture
def group(db, course, trainer, student, student2):
    g = Group.objects.create(
        name="Robotics A",
        course=course,
        trainer=trainer,
        start_date=dt.date(2024, 1, 1),
        end_date=dt.date(2024, 6, 30),
    )
    g.students.add(student, student2)
    return g


@pytest.fixture
def weekly_group(group):
    GroupScheduleSlot.objects.create(
        group=group, day_of_week="Monday", start_time=dt.time(10), end_time=dt.time(12)
    )
    GroupScheduleSlot.objects.create(
        group=group, day_of_week="Thursday", start_time=dt.time(14), end_time=dt.time(15, 30)
    )
    return group


@pytest.fixture
def make_session(db):
    def _make(group, *, status=Session.Status.SCHEDULED, day=None, number=None, **extra):
        return Session.objects.create(
            group=group,
            course=group.course,
            trainer=group.trainer,
            session_number=number or group.sessions.count() + 1,
            title=extra.pop("title", "Motors and gears"),
            scheduled_date=day or dt.date(2024, 3, 4),
            start_time=dt.time(10),
            end_time=dt.time(12),
            duration=120,
            status=status,
            **extra,
        )
    return _make


@pytest.fixture
def session(group, make_session):
    return make_session(group)


# ======================================================
# API
# ======================================================

@pytest.fixture
def api():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client
