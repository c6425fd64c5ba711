from __future__ import annotations

from flask import Flask, request

from ..common.http import (
    current_principal,
    date_arg,
    datetime_arg,
    int_arg,
    json_body,
    login_required,
    ok,
)
from ..container import Container
from ..core.exceptions import ValidationError
from .service import ActivityUpdate, ParticipantInput


def _participants(data: dict) -> list[ParticipantInput]:
    raw = data.get("participants") or []
    if not isinstance(raw, list):
        raise ValidationError("participants must be a list")
    out = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each participant must be an object")
        out.append(
            ParticipantInput(
                child_id=int_arg(item, "child_id"),
                observations=item.get("observations"),
                mood=item.get("mood"),
            )
        )
    return out


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activities", methods=["GET"], endpoint="activities_list")
    @login_required
    def list_activities():
        activities = container.activity_service.list_activities(
            current_principal(),
            classroom_id=int_arg(request.args, "classroom_id", required=False),
            on_date=date_arg(request.args, "date", required=False),
            type=request.args.get("type"),
        )
        return ok([a.to_dict() for a in activities], count=len(activities))

    @app.route("/api/activities", methods=["POST"], endpoint="activities_record")
    @login_required
    def record_activity():
        data = json_body()
        activity = container.activity_service.record_activity(
            current_principal(),
            title=data.get("title", ""),
            type=data.get("type", ""),
            activity_date=date_arg(data, "date", required=False),
            description=data.get("description"),
            classroom_id=int_arg(data, "classroom_id", required=False),
            start_time=datetime_arg(data, "start_time"),
            end_time=datetime_arg(data, "end_time"),
            status=data.get("status"),
            materials=data.get("materials"),
            learning_objectives=data.get("learning_objectives"),
            participants=_participants(data),
        )
        return ok(activity.to_dict(), status=201)

    @app.route("/api/activities/<int:activity_id>", methods=["GET"], endpoint="activities_get")
    @login_required
    def get_activity(activity_id: int):
        return ok(container.activity_service.get_activity(current_principal(), activity_id).to_dict())

    @app.route("/api/activities/<int:activity_id>", methods=["PUT"], endpoint="activities_update")
    @login_required
    def update_activity(activity_id: int):
        data = json_body()
        changes = ActivityUpdate(
            title=data.get("title"),
            description=data.get("description"),
            type=data.get("type"),
            status=data.get("status"),
            start_time=datetime_arg(data, "start_time"),
            end_time=datetime_arg(data, "end_time"),
            materials=data.get("materials"),
            learning_objectives=data.get("learning_objectives"),
        )
        activity = container.activity_service.update_activity(current_principal(), activity_id, changes)
        return ok(activity.to_dict())

    @app.route("/api/activities/<int:activity_id>", methods=["DELETE"], endpoint="activities_delete")
    @login_required
    def delete_activity(activity_id: int):
        container.activity_service.delete_activity(current_principal(), activity_id)
        return ok(message="Activity deleted")

    @app.route("/api/activities/<int:activity_id>/observations", methods=["POST"], endpoint="activities_observe")
    @login_required
    def add_observation(activity_id: int):
        data = json_body()
        activity = container.activity_service.add_observation(
            current_principal(),
            activity_id,
            int_arg(data, "child_id"),
            observations=data.get("observations"),
            mood=data.get("mood"),
        )
        return ok(activity.to_dict())

    @app.route("/api/employee/activities", methods=["GET"], endpoint="employee_activities")
    @login_required
    def my_activities():
        activities = container.activity_service.list_my_activities(current_principal())
        return ok([a.to_dict() for a in activities], count=len(activities))

    @app.route("/api/children/<int:child_id>/activities", methods=["GET"], endpoint="child_activities")
    @login_required
    def child_activities(child_id: int):
        activities = container.activity_service.child_activities(current_principal(), child_id)
        return ok([a.to_dict() for a in activities], count=len(activities))
