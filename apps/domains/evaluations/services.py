# PATH: apps/domains/evaluations/services.py
# Trainer evaluations of students per session + CLO-defined criteria.

from __future__ import annotations

import logging
from collections import OrderedDict

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import DomainError, OwnershipError, RosterError
from apps.domains.sessions.models import Session
from trainhub.adapters.db.django import repositories_evaluations as eval_repo
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import (
    GRADE_SCORES,
    PARAMETER_TYPES,
    SKILLS,
    EvaluationCriteria,
    StudentEvaluation,
)

logger = logging.getLogger(__name__)

E = StudentEvaluation

FLAG_FIELDS = ("needs_attention", "at_risk", "excelling", "parent_contact_needed")

WRITABLE_FIELDS = (
    "overall_rating",
    "skill_ratings",
    "participation_level",
    "comprehension_level",
    "attitude",
    "focus",
    "attendance_status",
    "parameters",
    "notes",
    "evaluation_date",
    "parent_contact_needed",
)


# ======================================================
# Criteria
# ======================================================

def validate_criteria_parameters(parameters) -> list[dict]:
    """Normalize a criteria parameter list; weights must total 0 or 100."""
    if parameters in (None, ""):
        return []
    if not isinstance(parameters, list):
        raise DomainError("parameters must be a list")

    seen = set()
    cleaned = []
    for idx, p in enumerate(parameters, start=1):
        if not isinstance(p, dict) or not (p.get("name") or "").strip():
            raise DomainError(f"parameter {idx}: name is required")
        name = p["name"].strip()
        if name in seen:
            raise DomainError(f"parameter {idx}: duplicate name {name!r}")
        seen.add(name)

        kind = p.get("type", "rating")
        if kind not in PARAMETER_TYPES:
            raise DomainError(f"parameter {idx}: type must be one of {', '.join(PARAMETER_TYPES)}")
        weight = p.get("weight", 0) or 0
        if not isinstance(weight, (int, float)) or not 0 <= weight <= 100:
            raise DomainError(f"parameter {idx}: weight must be between 0 and 100")

        item = {
            "name": name,
            "description": (p.get("description") or "").strip(),
            "type": kind,
            "weight": weight,
            "required": bool(p.get("required", True)),
            "order": int(p.get("order", idx - 1) or 0),
        }
        if kind == "rating":
            scale = p.get("rating_scale") or {}
            lo, hi = scale.get("min", 1), scale.get("max", 5)
            if hi <= lo:
                raise DomainError(f"parameter {idx}: rating_scale max must exceed min")
            item["rating_scale"] = {"min": lo, "max": hi}
        cleaned.append(item)

    total = sum(p["weight"] for p in cleaned)
    if total and total != 100:
        raise DomainError(f"Parameter weights must sum to 100%, current total: {total}%")
    return sorted(cleaned, key=lambda p: p["order"])


def validate_parameter_values(criteria: EvaluationCriteria | None, values) -> dict:
    if criteria is None:
        return values or {}
    values = values or {}
    if not isinstance(values, dict):
        raise DomainError("parameters must be an object")

    for config in criteria.parameters or []:
        name = config["name"]
        value = values.get(name)
        if value in (None, ""):
            if config.get("required", True):
                raise DomainError(f"Parameter {name!r} is required")
            continue

        kind = config.get("type", "rating")
        if kind == "rating":
            scale = config.get("rating_scale") or {}
            lo, hi = scale.get("min", 1), scale.get("max", 5)
            if not isinstance(value, (int, float)) or not lo <= value <= hi:
                raise DomainError(f"Parameter {name!r} must be between {lo} and {hi}")
        elif kind == "percentage":
            if not isinstance(value, (int, float)) or not 0 <= value <= 100:
                raise DomainError(f"Parameter {name!r} must be between 0 and 100")
        elif kind == "grade":
            if str(value).upper() not in GRADE_SCORES:
                raise DomainError(f"Parameter {name!r} must be one of {', '.join(GRADE_SCORES)}")
        elif kind == "boolean":
            if not isinstance(value, bool):
                raise DomainError(f"Parameter {name!r} must be true or false")
    return values


def criteria_for_group(group):
    return eval_repo.criteria_for_group(group)


# ======================================================
# Rules
# ======================================================

def apply_auto_flags(evaluation: StudentEvaluation) -> None:
    """Raises flags from the ratings; flags set by hand are never cleared here."""
    if evaluation.overall_rating <= 2:
        evaluation.at_risk = True
    if evaluation.comprehension_level == E.Comprehension.STRUGGLING:
        evaluation.needs_attention = True
    if evaluation.attitude == E.Attitude.NEGATIVE or (evaluation.focus or 3) <= 2:
        evaluation.needs_attention = True
    if evaluation.attendance_status == E.AttendanceStatus.ABSENT:
        evaluation.needs_attention = True
    if evaluation.overall_rating >= 5 and evaluation.average_skill_rating >= 4.5:
        evaluation.excelling = True


def _clean_skill_ratings(value) -> dict:
    ratings = {skill: 3 for skill in SKILLS}
    if value in (None, ""):
        return ratings
    if not isinstance(value, dict):
        raise DomainError("skill_ratings must be an object")
    for skill, rating in value.items():
        if skill not in SKILLS:
            raise DomainError(f"Unknown skill {skill!r}")
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise DomainError(f"{skill} must be an integer between 1 and 5")
        ratings[skill] = rating
    return ratings


def _check_rating(value) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 5:
        raise DomainError("overall_rating must be a whole number between 1 and 5")
    return value


def _full_clean(evaluation: StudentEvaluation) -> None:
    try:
        evaluation.full_clean(
            exclude=["student", "session", "group", "trainer", "criteria"],
            validate_unique=False,
        )
    except DjangoValidationError as e:
        raise DomainError(_error_text(e))


def _check_session(session: Session, trainer) -> None:
    if session.trainer_id != trainer.id:
        raise OwnershipError("Session not found or does not belong to you")
    if session.status == Session.Status.CANCELLED:
        raise DomainError("Cancelled sessions cannot be evaluated")


# ======================================================
# Write
# ======================================================

def create_evaluation(*, trainer, session: Session, student_id: int, data: dict) -> StudentEvaluation:
    _check_session(session, trainer)
    if not group_repo.group_roster_has(session.group, student_id):
        raise RosterError("Student is not in this session's group")
    if eval_repo.evaluation_exists(student_id, session):
        raise DomainError("Evaluation already exists for this student and session", status_code=409)

    criteria = criteria_for_group(session.group)
    fields = {k: data[k] for k in WRITABLE_FIELDS if k in data}
    fields["overall_rating"] = _check_rating(data.get("overall_rating"))
    fields["skill_ratings"] = _clean_skill_ratings(data.get("skill_ratings"))
    fields["parameters"] = validate_parameter_values(criteria, data.get("parameters"))

    evaluation = StudentEvaluation(
        student_id=student_id,
        session=session,
        group_id=session.group_id,
        trainer=trainer,
        criteria=criteria,
        **fields,
    )
    for flag in FLAG_FIELDS:
        if data.get(flag):
            setattr(evaluation, flag, True)
    apply_auto_flags(evaluation)
    _full_clean(evaluation)
    evaluation.save()

    logger.info(
        "[evaluation_create] evaluation_id=%s session_id=%s student_id=%s rating=%s flags=%s",
        evaluation.id,
        session.id,
        student_id,
        evaluation.overall_rating,
        [f for f in FLAG_FIELDS if getattr(evaluation, f)],
    )
    return evaluation


def update_evaluation(evaluation: StudentEvaluation, changes: dict, *, trainer) -> StudentEvaluation:
    if evaluation.trainer_id != trainer.id:
        raise OwnershipError("You can only edit your own evaluations")

    unknown = sorted(set(changes) - set(WRITABLE_FIELDS) - set(FLAG_FIELDS))
    if unknown:
        raise DomainError(f"Fields cannot be changed: {', '.join(unknown)}")

    if "overall_rating" in changes:
        changes["overall_rating"] = _check_rating(changes["overall_rating"])
    if "skill_ratings" in changes:
        changes["skill_ratings"] = _clean_skill_ratings(changes["skill_ratings"])
    if "parameters" in changes:
        changes["parameters"] = validate_parameter_values(evaluation.criteria, changes["parameters"])

    for field, value in changes.items():
        setattr(evaluation, field, value)
    apply_auto_flags(evaluation)
    _full_clean(evaluation)
    evaluation.save()
    return evaluation


def bulk_create(*, trainer, session: Session, items) -> dict:
    """
    One session, many students. Each item succeeds or fails on its own;
    failures are collected instead of aborting the batch.
    """
    _check_session(session, trainer)
    if not isinstance(items, list) or not items:
        raise DomainError("evaluations must be a non-empty list")

    created, errors = [], []
    for idx, item in enumerate(items):
        student_id = (item or {}).get("student") or (item or {}).get("student_id")
        try:
            if not student_id:
                raise DomainError("student is required")
            with DjangoUnitOfWork():
                created.append(
                    create_evaluation(
                        trainer=trainer,
                        session=session,
                        student_id=int(student_id),
                        data=item,
                    )
                )
        except ValueError as e:
            errors.append({"index": idx, "student": student_id, "detail": _error_text(e)})

    logger.info(
        "[evaluation_bulk] session_id=%s created=%s failed=%s",
        session.id,
        len(created),
        len(errors),
    )
    return {"created": created, "errors": errors}


def _error_text(exc) -> str:
    # django ValidationError carries message_dict / messages
    if hasattr(exc, "message_dict"):
        return "; ".join(f"{k}: {', '.join(v)}" for k, v in exc.message_dict.items())
    if hasattr(exc, "messages"):
        return "; ".join(exc.messages)
    return str(exc)


def share(evaluation: StudentEvaluation, *, student=True, parent=False, now=None) -> StudentEvaluation:
    now = now or timezone.now()
    if student:
        evaluation.shared_with_student = True
    if parent:
        evaluation.shared_with_parent = True
    if evaluation.shared_at is None and (student or parent):
        evaluation.shared_at = now
    evaluation.save(update_fields=["shared_with_student", "shared_with_parent", "shared_at", "updated_at"])
    logger.info(
        "[evaluation_share] evaluation_id=%s student=%s parent=%s",
        evaluation.id,
        evaluation.shared_with_student,
        evaluation.shared_with_parent,
    )
    return evaluation


# ======================================================
# Read models
# ======================================================

def evaluation_stats(qs) -> dict:
    evaluations = list(qs.select_related("criteria"))
    total = len(evaluations)
    distribution = {r: 0 for r in range(1, 6)}
    flagged = {"needs_attention": 0, "at_risk": 0, "excelling": 0}

    if not total:
        return {
            "total": 0,
            "average_rating": 0,
            "average_performance_score": 0,
            "rating_distribution": distribution,
            "attendance_rate": 0,
            "flagged_students": flagged,
        }

    present = 0
    for ev in evaluations:
        distribution[ev.overall_rating] = distribution.get(ev.overall_rating, 0) + 1
        if ev.attendance_status == E.AttendanceStatus.PRESENT:
            present += 1
        for flag in flagged:
            if getattr(ev, flag):
                flagged[flag] += 1

    return {
        "total": total,
        "average_rating": round(sum(e.overall_rating for e in evaluations) / total, 1),
        "average_performance_score": round(sum(e.performance_score for e in evaluations) / total),
        "rating_distribution": distribution,
        "attendance_rate": round(present / total * 100),
        "flagged_students": flagged,
    }


def flagged_students(qs) -> list[dict]:
    """Flagged evaluations grouped per student, newest first."""
    grouped = OrderedDict()
    rows = qs.filter(Q(needs_attention=True) | Q(at_risk=True))
    for ev in rows.order_by("-evaluation_date", "-id"):
        entry = grouped.setdefault(ev.student_id, {
            "student_id": ev.student_id,
            "student_name": ev.student.display_name,
            "evaluations": [],
        })
        entry["evaluations"].append(ev)
    return list(grouped.values())
