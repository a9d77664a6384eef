# PATH: apps/domains/projects/services.py
from __future__ import annotations

import logging

from apps.core.exceptions import DomainError, OwnershipError, RosterError
from apps.core.models import User
from trainhub.adapters.db.django import repositories_projects as project_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Competition, Project, Team

logger = logging.getLogger(__name__)

MANAGER_ROLES = ("clo", "admin", "superadmin")


def is_manager(user) -> bool:
    return bool(user.is_superuser or getattr(user, "role", None) in MANAGER_ROLES)


# ======================================================
# Projects
# ======================================================

def check_project_owner(project: Project, user) -> None:
    if not is_manager(user) and project.owner_id != user.id:
        raise OwnershipError("You can only manage your own projects")


def set_project_part(project: Project, part, qty, *, by) -> dict:
    check_project_owner(project, by)
    try:
        qty = int(qty)
    except (TypeError, ValueError):
        raise DomainError("qty must be an integer")
    if qty < 1:
        raise DomainError("qty must be at least 1")
    if not part.is_active:
        raise DomainError(f"{part.name} is no longer available")

    line, created = project_repo.project_part_upsert(project, part, qty)
    logger.info(
        "[project_part] project_id=%s part_id=%s qty=%s created=%s",
        project.id, part.id, qty, created,
    )
    return {"part": part.id, "part_name": part.name, "qty": line.qty, "created": created}


def remove_project_part(project: Project, part_id, *, by) -> None:
    check_project_owner(project, by)
    if not project_repo.project_part_delete(project, part_id):
        raise DomainError("Part is not on this project", status_code=404)


def project_summary(project: Project) -> dict:
    """Bill of materials against current stock plus order counts."""
    lines = []
    for pp in project.project_parts.all():
        stock = getattr(pp.part, "stock", None)
        available = stock.available_qty if stock else 0
        lines.append({
            "part": pp.part_id,
            "part_name": pp.part.name,
            "qty": pp.qty,
            "available": available,
            "shortfall": max(0, pp.qty - available),
        })
    orders = project_repo.project_orders(project)
    by_status = {}
    for o in orders:
        by_status[o.status] = by_status.get(o.status, 0) + 1
    return {
        "project": project.id,
        "parts": lines,
        "ready": all(line["shortfall"] == 0 for line in lines),
        "orders": by_status,
    }


# ======================================================
# Teams
# ======================================================

def check_team_manager(team: Team, user) -> None:
    if not is_manager(user) and team.coach_id != user.id:
        raise OwnershipError("Only the coach or a CLO can change this team")


def add_member(team: Team, student, *, by) -> Team:
    check_team_manager(team, by)
    if getattr(student, "role", None) != User.Role.STUDENT:
        raise RosterError("Only student accounts can join a team")
    if team.competition.status == Competition.Status.COMPLETED:
        raise RosterError("Competition is already completed")

    with DjangoUnitOfWork():
        if team.members.filter(id=student.id).exists():
            raise RosterError("Student is already on this team")
        other = project_repo.student_team_in_competition(
            student, team.competition, exclude_team_id=team.id
        )
        if other is not None:
            raise RosterError(f"Student is already on team {other.name} in this competition")
        if team.is_full:
            raise RosterError(f"Team is full ({team.max_members} members)")
        team.members.add(student)

    logger.info("[team_roster] add team_id=%s student_id=%s by=%s", team.id, student.id, by.id)
    return team


def remove_member(team: Team, student, *, by) -> Team:
    check_team_manager(team, by)
    if not team.members.filter(id=student.id).exists():
        raise RosterError("Student is not on this team")
    team.members.remove(student)
    logger.info("[team_roster] remove team_id=%s student_id=%s by=%s", team.id, student.id, by.id)
    return team

