"""
Projects / competitions / teams access for services and views.
"""
from __future__ import annotations


def project_queryset():
    from apps.domains.projects.models import Project
    return Project.objects.select_related("owner").prefetch_related("project_parts__part__stock")


def project_filter_owner(user):
    return project_queryset().filter(owner=user)


def project_part_upsert(project, part, qty):
    from apps.domains.projects.models import ProjectPart
    obj, created = ProjectPart.objects.update_or_create(
        project=project, part=part, defaults={"qty": qty}
    )
    return obj, created


def project_part_delete(project, part_id) -> int:
    from apps.domains.projects.models import ProjectPart
    deleted, _ = ProjectPart.objects.filter(project=project, part_id=part_id).delete()
    return deleted


def project_orders(project):
    from apps.domains.inventory.models import Order
    return (
        Order.objects.filter(project=project)
        .select_related("requested_by", "decided_by")
        .prefetch_related("items__part")
        .order_by("-created_at", "-id")
    )


def competition_queryset():
    from django.db.models import Count
    from apps.domains.projects.models import Competition
    return Competition.objects.annotate(team_count=Count("teams"))


def team_queryset():
    from apps.domains.projects.models import Team
    return Team.objects.select_related("competition", "coach").prefetch_related("members")


def team_filter_competition(competition):
    return team_queryset().filter(competition=competition)


def student_team_in_competition(student, competition, *, exclude_team_id=None):
    from apps.domains.projects.models import Team
    qs = Team.objects.filter(competition=competition, members=student)
    if exclude_team_id:
        qs = qs.exclude(id=exclude_team_id)
    return qs.first()
